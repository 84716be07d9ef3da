import threading
from typing import Optional

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from granacred.api.auth import require_api_key
from granacred.api.schemas import (
    IdentifierIn,
    InstructionsOut,
    LinkOpenOut,
    LinksOut,
    WithdrawalIn,
    WorkflowSnapshot,
)
from granacred.core.workflow import PendingCall, Workflow
from granacred.links.deeplink import referral_link, support_link

router = APIRouter(prefix="/workflow", dependencies=[Depends(require_api_key)])

# One device, one user: a single in-process workflow
_workflow: Optional[Workflow] = None
# Sync dependencies run in the threadpool; first requests may race
_workflow_lock = threading.Lock()


def get_workflow() -> Workflow:
    global _workflow
    if _workflow is None:
        with _workflow_lock:
            if _workflow is None:
                wf = Workflow()
                wf.restore()
                _workflow = wf
    return _workflow


async def _complete(wf: Workflow, call: PendingCall) -> dict:
    """
    begin_* already ran on the event loop; only the round trip leaves it.
    resolve/fail decide whether the answer still applies.
    """
    try:
        result = await run_in_threadpool(wf.gateway.send, call.action, call.payload)
    except Exception as e:
        wf.fail(call, e)
    else:
        wf.resolve(call, result)
    return wf.snapshot()


@router.get("", response_model=WorkflowSnapshot)
def get_state(wf: Workflow = Depends(get_workflow)):
    return wf.snapshot()


@router.put("/identifier", response_model=WorkflowSnapshot)
def put_identifier(body: IdentifierIn, wf: Workflow = Depends(get_workflow)):
    wf.set_identifier(body.cpf)
    return wf.snapshot()


@router.post("/check", response_model=WorkflowSnapshot)
async def post_check(wf: Workflow = Depends(get_workflow)):
    return await _complete(wf, wf.begin_check())


@router.post("/status", response_model=WorkflowSnapshot)
async def post_status(wf: Workflow = Depends(get_workflow)):
    return await _complete(wf, wf.begin_status())


@router.post("/retry", response_model=WorkflowSnapshot)
async def post_retry(wf: Workflow = Depends(get_workflow)):
    return await _complete(wf, wf.begin_retry())


@router.post("/withdrawal", response_model=WorkflowSnapshot)
def post_begin_withdrawal(wf: Workflow = Depends(get_workflow)):
    wf.begin_withdrawal()
    return wf.snapshot()


@router.delete("/withdrawal", response_model=WorkflowSnapshot)
def delete_withdrawal(wf: Workflow = Depends(get_workflow)):
    wf.cancel_withdrawal()
    return wf.snapshot()


@router.post("/withdrawal/submit", response_model=WorkflowSnapshot)
async def post_submit_withdrawal(body: WithdrawalIn, wf: Workflow = Depends(get_workflow)):
    return await _complete(wf, wf.begin_submit(body.to_request()))


@router.post("/close", response_model=WorkflowSnapshot)
def post_close(wf: Workflow = Depends(get_workflow)):
    wf.close()
    return wf.snapshot()


@router.get("/instructions", response_model=InstructionsOut)
def get_instructions(wf: Workflow = Depends(get_workflow)):
    return {"image_url": wf.view_instructions()}


@router.post("/formalization/open", response_model=LinkOpenOut)
def post_open_formalization(wf: Workflow = Depends(get_workflow)):
    opened = wf.open_formalization()
    return {"opened": opened, "url": wf.result.formalization_url if wf.result else None}


@router.get("/links", response_model=LinksOut)
def get_links():
    """Shortcut links shown once the CPF is remembered (support chat, referral)."""
    return {"support": support_link(), "referral": referral_link()}
