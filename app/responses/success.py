from .base import build_response


def success_response(message: str = None, data=None):
    return build_response(200, True, message=message, data=data)
