from fastapi import Request


def get_image_storage(request: Request):
    """FastAPI dependency: the image storage built by the app lifespan."""
    return request.app.state.image_storage


def get_mailer(request: Request):
    return request.app.state.mailer
