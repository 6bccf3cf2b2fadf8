from typing import Final
import os

# docs root
DOCS_ROOT = os.getenv("DOCS_ROOT", os.path.join(os.getcwd(), "docs"))
HIDDEN_PREFIX: Final = "."
DEFAULT_FILE_CONTENT: Final = "# New Document\n\nStart writing your content here..."

# upstream APIs
AI_BACKEND_URL = os.getenv("AI_BACKEND_URL", "http://localhost:3001")
GITLAB_API_URL = os.getenv("GITLAB_API_URL", "https://gitlab.com/api/v4")
GITLAB_DEFAULT_REF = os.getenv("GITLAB_DEFAULT_REF", "main")
GITLAB_PAGE_SIZE = int(os.getenv("GITLAB_PAGE_SIZE", "100"))
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10.0"))

# import
CODEBASE_FOLDER: Final = "codebase"
IMPORT_STEP_DELAY = float(os.getenv("IMPORT_STEP_DELAY", "0.1"))  # seconds between files
IMPORT_AUTO_DISMISS_SECONDS = int(os.getenv("IMPORT_AUTO_DISMISS_SECONDS", "3"))

# search
SEARCH_RESULT_LIMIT = int(os.getenv("SEARCH_RESULT_LIMIT", "20"))
SEARCH_CONTEXT_LINES = 2

# server
DEBUG = os.getenv("DEBUG", "").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
