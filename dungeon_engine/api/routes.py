from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from dungeon_engine.api.deps import get_engine, init_engine
from dungeon_engine.api.models import (
    DispatchOutcome,
    DispatchTriggerRequest,
    DispatchTriggerResponse,
    ExecuteEventRequest,
    ExecuteEventResponse,
)
from dungeon_engine.authoring.validators import ValidationReport, validate_event
from dungeon_engine.engine import EventEngine
from dungeon_engine.models import DungeonEvent, GameState, GameStatePatch

router = APIRouter()


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/session", response_model=GameState, status_code=status.HTTP_201_CREATED)
async def start_session_route(payload: GameState) -> GameState:
    engine = init_engine(initial_state=payload)
    return engine.get_game_state()


@router.get("/state", response_model=GameState)
async def get_state_route(engine: EventEngine = Depends(get_engine)) -> GameState:
    return engine.get_game_state()


@router.patch("/state", response_model=GameState)
async def patch_state_route(payload: GameStatePatch, engine: EventEngine = Depends(get_engine)) -> GameState:
    try:
        return await engine.patch_game_state(payload.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e


@router.post("/events/execute", response_model=ExecuteEventResponse)
async def execute_event_route(
    payload: ExecuteEventRequest,
    engine: EventEngine = Depends(get_engine),
) -> ExecuteEventResponse:
    result = await engine.execute_event(payload.event, payload.trigger_data)
    trail = engine.last_execution.trail if engine.last_execution is not None else []
    return ExecuteEventResponse(result=result, trail=trail, state=engine.get_game_state())


@router.post("/events/dispatch", response_model=DispatchTriggerResponse)
async def dispatch_trigger_route(
    payload: DispatchTriggerRequest,
    engine: EventEngine = Depends(get_engine),
) -> DispatchTriggerResponse:
    outcomes = await engine.dispatch_trigger(payload.events, payload.trigger_type, payload.trigger_data)
    return DispatchTriggerResponse(
        outcomes=[DispatchOutcome(event_id=eid, result=res) for eid, res in outcomes],
        state=engine.get_game_state(),
    )


@router.post("/events/validate", response_model=ValidationReport)
async def validate_event_route(payload: DungeonEvent) -> ValidationReport:
    return validate_event(payload)
