# runtime settings, read once from the environment
import os

API_BASE_URL = os.getenv("AGRIHUB_API_URL", "http://localhost:5000/api")
STORAGE_PATH = os.getenv("AGRIHUB_STORAGE_PATH", "data/storage.sqlite")
HTTP_TIMEOUT = float(os.getenv("AGRIHUB_HTTP_TIMEOUT", "10"))
LOG_FILE = os.getenv("AGRIHUB_LOG_FILE")
DEBUG = bool(os.getenv("DEBUG"))

# local storage keys, one record each
SESSION_KEY = "agrihubUser"
CART_KEY = "agrihubCart"

# seconds before checkout redirects away from an invalid state
CHECKOUT_REDIRECT_DELAY = 2.0
