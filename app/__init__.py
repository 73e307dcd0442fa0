# Package initialization - avoid duplicating FastAPI app instance
# The main FastAPI app is created and configured in app.main
