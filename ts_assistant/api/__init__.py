from ts_assistant.api.http_api import create_app

__all__ = ["create_app"]
