from datetime import datetime
from zap_shift.app.schemas.common import CamelModel


class TrackingLogResponse(CamelModel):
    id: int
    tracking_id: str
    status: str
    details: str
    created_at: datetime
