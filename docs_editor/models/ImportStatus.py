from pydantic import BaseModel
from typing import List, Literal, Optional


# Progress of one file in a bulk import, mutated in place while the batch runs
class ImportStatus(BaseModel):
    fileName: str
    status: Literal["pending", "importing", "success", "error"] = "pending"
    error: Optional[str] = None


class ImportReport(BaseModel):
    statuses: List[ImportStatus]
    successCount: int
    errorCount: int
    autoDismiss: bool  # panel may hide itself after IMPORT_AUTO_DISMISS_SECONDS
    autoDismissSeconds: Optional[int] = None
