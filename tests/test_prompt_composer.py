import pytest

from app.models.camera_view import DEFAULT_POSE, AspectRatio, CameraPose, Quality
from app.services.prompt_composer import (
    InvalidPose,
    classify_azimuth,
    classify_distance,
    classify_elevation,
    classify_zoom,
    compose,
)


def make_pose(**overrides):
    values = {
        "horizontal_angle": 0,
        "vertical_angle": 0,
        "distance": 4,
        "zoom": 1.0,
    }
    values.update(overrides)
    return CameraPose(**values)


@pytest.mark.parametrize("angle,expected", [
    (0, "front view"),
    (22.4, "front view"),
    (22.5, "right 3/4 view"),
    (67.5, "right side view"),
    (112.5, "right rear view"),
    (180, "back view"),
    (202.5, "left rear view"),
    (247.5, "left side view"),
    (292.5, "left 3/4 view"),
    (337.4, "left 3/4 view"),
    (337.5, "front view"),
    (-45, "left 3/4 view"),
    (-180, "back view"),
])
def test_azimuth_sectors(angle, expected):
    assert classify_azimuth(angle)[0] == expected


@pytest.mark.parametrize("k", [-3, -1, 1, 2, 10])
def test_azimuth_is_periodic(k):
    for angle in (-45, 0, 22.5, 100, 200, 337.5):
        base = compose(make_pose(horizontal_angle=angle))
        shifted = compose(make_pose(horizontal_angle=angle + 360 * k))
        assert base == shifted


@pytest.mark.parametrize("angle,expected", [
    (90, "zenith view (top-down)"),
    (70.1, "zenith view (top-down)"),
    (70, "high angle"),
    (35, "slight high angle"),
    (15, "slight high angle"),
    (10, "eye-level"),
    (0, "eye-level"),
    (-10, "low angle"),
    (-35, "extreme low angle (worm's eye view)"),
    (-90, "extreme low angle (worm's eye view)"),
])
def test_elevation_bands(angle, expected):
    assert classify_elevation(angle)[0] == expected


@pytest.mark.parametrize("distance,expected", [
    (1, "extreme close-up"),
    (3, "close-up"),
    (4.9, "close-up"),
    (5, "medium shot"),
    (6.5, "medium shot"),
    (7, "wide shot"),
    (15, "wide shot"),
])
def test_distance_bands(distance, expected):
    assert classify_distance(distance)[0] == expected


@pytest.mark.parametrize("zoom,expected", [
    (0.5, "wide angle lens"),
    (0.8, "standard lens"),
    (1.0, "standard lens"),
    (1.4, "telephoto lens"),
    (3.0, "telephoto lens"),
])
def test_zoom_bands(zoom, expected):
    assert classify_zoom(zoom)[0] == expected


def test_default_pose_prompt():
    prompt = compose(DEFAULT_POSE)
    assert prompt.primary == "<sks> left 3/4 view, slight high angle, medium shot, standard lens"
    assert prompt.secondary == "左侧 3/4 侧视图，微高角度，中景，标准镜头"


def test_compose_is_idempotent():
    pose = make_pose(horizontal_angle=123.4, vertical_angle=-20, distance=2.2, zoom=2.0)
    first = compose(pose)
    second = compose(pose)
    assert first.primary == second.primary
    assert first.secondary == second.secondary


def test_quality_and_ratio_do_not_change_prompt():
    a = make_pose(quality=Quality.K1, aspect_ratio=AspectRatio.SQUARE, tilt=0)
    b = make_pose(quality=Quality.K4, aspect_ratio=AspectRatio.LANDSCAPE_16_9, tilt=30)
    assert compose(a) == compose(b)


def test_pose_accepts_camel_case_fields():
    pose = CameraPose(horizontalAngle=10, verticalAngle=5, distance=3, zoom=1.2, aspectRatio="9:16")
    assert pose.horizontal_angle == 10
    assert pose.aspect_ratio is AspectRatio.PORTRAIT_9_16


@pytest.mark.parametrize("zoom", [0, -1])
def test_non_positive_zoom_rejected_by_model(zoom):
    with pytest.raises(ValueError):
        make_pose(zoom=zoom)


def test_non_positive_zoom_rejected_by_compose():
    pose = CameraPose.model_construct(
        horizontal_angle=0, vertical_angle=0, distance=4, zoom=0,
        tilt=0, quality=Quality.K2, aspect_ratio=AspectRatio.SQUARE,
    )
    with pytest.raises(InvalidPose):
        compose(pose)


def test_pose_is_immutable():
    with pytest.raises(ValueError):
        DEFAULT_POSE.zoom = 2.0
