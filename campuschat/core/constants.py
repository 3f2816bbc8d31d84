# campuschat/core/constants.py
SERVICE_NAME = "campuschat-api"
API_VERSION = "0.1.0"
API_PREFIX = "/api/v1"
CHAT_PREFIX = f"{API_PREFIX}/chat"
