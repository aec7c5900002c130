from pydantic import BaseModel


class ScanSummaryResponse(BaseModel):
    """Outcome of one reminder scan run"""
    window: str
    candidates_scanned: int
    reminders_sent: int
    messages_sent: int
    skipped: int
    failed: int
