from fastapi import APIRouter, Depends, HTTPException, Header
from granacred.settings import settings
from granacred.api.routes import get_workflow
from granacred.core.workflow import Workflow
import granacred.observability.metrics as metrics

router = APIRouter(prefix="/admin", tags=["admin"])

def require_admin(x_admin_key: str = Header(default="", alias="x-admin-key")):
    if not settings.ADMIN_RBAC_ENABLED:
        return
    # Secure default: if enabled but no key configured, reject all.
    if not settings.ADMIN_API_KEY:
        raise HTTPException(status_code=403, detail="Admin access disabled (no key configured)")
    if x_admin_key != settings.ADMIN_API_KEY:
        raise HTTPException(status_code=403, detail="Invalid admin key")

@router.get("/session")
def get_session_snapshot(wf: Workflow = Depends(get_workflow), _=Depends(require_admin)):
    """Compact view of the in-process workflow, CPF masked."""
    digits = wf.identifier
    pending = wf.pending
    return {
        "state": wf.state.value,
        "cpfSuffix": digits[-2:] if len(digits) >= 2 else "",
        "remembered": wf.remembered,
        "pendingAction": pending.action if pending else None,
        "pendingGeneration": pending.generation if pending else None,
        "resultStatus": wf.result.status.value if wf.result else None,
    }

@router.get("/metrics")
def get_metrics(_=Depends(require_admin)):
    """Gateway counters and latency percentiles backed by Redis."""
    return metrics.get_gateway_snapshot()
