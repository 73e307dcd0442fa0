from typing import List, Tuple

from app.models.camera_view import BilingualPrompt, CameraPose

PROMPT_PREFIX = "<sks>"

# (english, chinese) labels indexed by 45 degree sector, starting at 0 = front
AZIMUTH_LABELS: List[Tuple[str, str]] = [
    ("front view", "正视图"),
    ("right 3/4 view", "右侧 3/4 侧视图"),
    ("right side view", "右侧正视图"),
    ("right rear view", "右后侧视图"),
    ("back view", "背视图"),
    ("left rear view", "左后侧视图"),
    ("left side view", "左侧正视图"),
    ("left 3/4 view", "左侧 3/4 侧视图"),
]

# Strict ">" thresholds, checked top-down
ELEVATION_BANDS: List[Tuple[float, str, str]] = [
    (70.0, "zenith view (top-down)", "俯视 (鸟瞰)"),
    (35.0, "high angle", "高角度仰拍"),
    (10.0, "slight high angle", "微高角度"),
    (-10.0, "eye-level", "平视"),
    (-35.0, "low angle", "低角度"),
]
ELEVATION_FLOOR = ("extreme low angle (worm's eye view)", "极低角度仰视 (虫视)")

# Strict "<" thresholds, checked bottom-up
DISTANCE_BANDS: List[Tuple[float, str, str]] = [
    (3.0, "extreme close-up", "特写"),
    (5.0, "close-up", "近景"),
    (7.0, "medium shot", "中景"),
]
DISTANCE_CEILING = ("wide shot", "全景/远景")

ZOOM_BANDS: List[Tuple[float, str, str]] = [
    (0.8, "wide angle lens", "广角镜头"),
    (1.4, "standard lens", "标准镜头"),
]
ZOOM_CEILING = ("telephoto lens", "长焦镜头")


class InvalidPose(ValueError):
    """Raised when a pose cannot be classified"""
    pass


def normalize_azimuth(angle: float) -> float:
    return ((angle % 360) + 360) % 360


def classify_azimuth(angle: float) -> Tuple[str, str]:
    """
    Map an azimuth in degrees to one of eight 45 degree sectors.
    Sector boundaries sit at the midpoints (22.5, 67.5, ...) and are half-open,
    so 22.5 belongs to "right 3/4" and 337.5 belongs to "front".
    """
    h = normalize_azimuth(angle)
    sector = int((h + 22.5) // 45) % 8
    return AZIMUTH_LABELS[sector]


def classify_elevation(angle: float) -> Tuple[str, str]:
    for threshold, en, zh in ELEVATION_BANDS:
        if angle > threshold:
            return en, zh
    return ELEVATION_FLOOR


def classify_distance(distance: float) -> Tuple[str, str]:
    for threshold, en, zh in DISTANCE_BANDS:
        if distance < threshold:
            return en, zh
    return DISTANCE_CEILING


def classify_zoom(zoom: float) -> Tuple[str, str]:
    if zoom <= 0:
        raise InvalidPose(f"zoom must be positive, got {zoom}")
    for threshold, en, zh in ZOOM_BANDS:
        if zoom < threshold:
            return en, zh
    return ZOOM_CEILING


def compose(pose: CameraPose) -> BilingualPrompt:
    """
    Translate a camera pose into a bilingual photographic prompt.

    The English text is sent to the generation model; the Chinese text is for display.
    Only the four framing parameters contribute, so quality/aspect ratio/tilt changes
    leave the prompt untouched.
    """
    if pose.distance <= 0:
        raise InvalidPose(f"distance must be positive, got {pose.distance}")

    phrases = [
        classify_azimuth(pose.horizontal_angle),
        classify_elevation(pose.vertical_angle),
        classify_distance(pose.distance),
        classify_zoom(pose.zoom),
    ]

    primary = f"{PROMPT_PREFIX} " + ", ".join(en for en, _ in phrases)
    secondary = "，".join(zh for _, zh in phrases)
    return BilingualPrompt(primary=primary, secondary=secondary)
