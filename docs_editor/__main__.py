# python -m docs_editor  (same as: uvicorn docs_editor.main:app --host 0.0.0.0 --port 8000)
import uvicorn

from .config import HOST, PORT

uvicorn.run("docs_editor.main:app", host=HOST, port=PORT)
