from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from research_writer.agents.tasks import TASKS, run_task
from research_writer.analyzer import analyze_paper
from research_writer.models.agent_schemas import AgentResult, AgentTimeoutError, LLMGatewayError
from research_writer.models.schemas import AnalysisResult
from research_writer.services.llm_service import LLMGateway

logger = logging.getLogger(__name__)

app = FastAPI(title="research-writer API")

_gateway: LLMGateway | None = None


def get_gateway() -> LLMGateway:
    global _gateway
    if _gateway is None:
        _gateway = LLMGateway()
    return _gateway


class AnalyzeRequest(BaseModel):
    text: str
    checks: list[str] | None = None


class TaskRequest(BaseModel):
    text: str
    params: dict[str, Any] = {}
    max_steps: int | None = None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/health")
async def health():
    return {"status": "healthy"}


@app.get("/tasks")
async def list_tasks():
    return [
        {
            "name": t.name,
            "description": t.description,
            "parameters": list(t.parameters),
            "required": list(t.required),
        }
        for t in TASKS.values()
    ]


@app.post("/analyze", response_model=AnalysisResult)
async def analyze(request: AnalyzeRequest):
    try:
        return analyze_paper(request.text, checks=request.checks)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@app.post("/tasks/{task}", response_model=AgentResult)
async def run(task: str, request: TaskRequest):
    if task not in TASKS:
        raise HTTPException(status_code=404, detail=f"Unknown task '{task}'")
    if request.max_steps is not None and request.max_steps < 1:
        raise HTTPException(status_code=422, detail="max_steps must be >= 1")
    unknown = sorted(set(request.params) - set(TASKS[task].parameters))
    if unknown:
        raise HTTPException(status_code=422, detail=f"Unknown parameter(s): {', '.join(unknown)}")

    logger.info("Task %s requested (%d chars)", task, len(request.text))
    try:
        return await run_task(
            task,
            request.text,
            get_gateway(),
            max_steps=request.max_steps,
            **request.params,
        )
    except LLMGatewayError as e:
        logger.error("Task %s failed: %s", task, e)
        raise HTTPException(status_code=503, detail=str(e))
    except AgentTimeoutError as e:
        raise HTTPException(status_code=504, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
