from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from tinigom.core.timeutils import utcnow
from tinigom.deps import get_gateway
from tinigom.models.finance import Todo
from tinigom.schemas import TodoCreate, TodoOut, TodoUpdate
from tinigom.services.gateway import NotFoundError, PersistenceGateway, StorageUnavailableError

router = APIRouter(tags=["todos"])


@router.get("")
def list_todos(gateway: PersistenceGateway = Depends(get_gateway)):
    try:
        rows = gateway.todos.list(order_by=[Todo.created_at.desc(), Todo.id.desc()])
    except StorageUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"todos": [TodoOut.model_validate(t) for t in rows]}


@router.post("")
def create_todo(payload: TodoCreate, gateway: PersistenceGateway = Depends(get_gateway)):
    try:
        todo = gateway.todos.insert({
            "text": payload.text,
            "assigned_to": payload.assigned_to,
            "completed": False,
        })
    except StorageUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"todo": TodoOut.model_validate(todo)}


@router.put("")
def update_todo(payload: TodoUpdate, gateway: PersistenceGateway = Depends(get_gateway)):
    """
    Toggle a todo. `completed` is optional; updated_at is always stamped.
    """
    values = {"updated_at": utcnow()}
    if payload.completed is not None:
        values["completed"] = payload.completed

    try:
        todo = gateway.todos.update(payload.id, values)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"todo": TodoOut.model_validate(todo)}


@router.delete("")
def delete_todo(id: Optional[int] = None, gateway: PersistenceGateway = Depends(get_gateway)):
    if id is None:
        raise HTTPException(status_code=400, detail="Todo ID is required")
    try:
        gateway.todos.delete(id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True}
