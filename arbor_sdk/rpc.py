"""JSON-over-stdin/stdout RPC bridge for arbor-chat."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Awaitable, Callable, Dict, Optional

from arbor_ai.errors import CollaboratorError
from arbor_session.chat import ChatService
from arbor_session.errors import MessageNotFound, SessionNotFound, StoreError, ValidationError

from .config import load_settings
from .sdk import create_chat_service
from .wire import to_wire

logger = logging.getLogger(__name__)

Handler = Callable[[ChatService, Dict[str, Any]], Awaitable[Dict[str, Any]]]


def _emit(obj: Any) -> None:
    sys.stdout.write(json.dumps(to_wire(obj)) + "\n")
    sys.stdout.flush()


def _success(command: str, request_id: Optional[str] = None, data: Optional[dict] = None) -> dict:
    payload = {"type": "response", "command": command, "success": True}
    if request_id:
        payload["id"] = request_id
    if data is not None:
        payload["data"] = data
    return payload


def _error(
    command: str,
    message: str,
    request_id: Optional[str] = None,
    *,
    code: str = "bad_request",
    extra: Optional[dict] = None,
) -> dict:
    payload = {"type": "response", "command": command, "success": False, "error": message, "code": code}
    if request_id:
        payload["id"] = request_id
    if extra:
        payload.update(extra)
    return payload


def _require(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{key} is required")
    return value


async def _handle_health(_service: ChatService, _payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"status": "ok"}


async def _handle_create_session(service: ChatService, _payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"sessionId": service.store.create_session()}


async def _handle_chat(service: ChatService, payload: Dict[str, Any]) -> Dict[str, Any]:
    message = payload.get("message")
    if not isinstance(message, str) or not message.strip():
        raise ValidationError("message is required")
    session_id = _require(payload, "sessionId")
    reply = await service.chat(session_id, message)
    return {"response": reply.response, "messageId": reply.message_id, "userMessageId": reply.user_message_id}


async def _handle_regenerate(service: ChatService, payload: Dict[str, Any]) -> Dict[str, Any]:
    session_id = _require(payload, "sessionId")
    parent_id = payload.get("parentId")
    reply = await service.regenerate(session_id, parent_id if isinstance(parent_id, str) and parent_id else None)
    return {"response": reply.response, "messageId": reply.message_id, "userMessageId": reply.user_message_id}


async def _handle_get_session(service: ChatService, payload: Dict[str, Any]) -> Dict[str, Any]:
    view = service.store.get_session_view(_require(payload, "sessionId"))
    return {
        "sessionId": view.session_id,
        "messages": to_wire(view.messages),
        "currentBranch": view.active_branch,
        "createdAt": view.created_at.isoformat(),
    }


async def _handle_branch(service: ChatService, payload: Dict[str, Any]) -> Dict[str, Any]:
    session_id = _require(payload, "sessionId")
    from_id = _require(payload, "fromMessageId")
    branch = service.store.switch_branch(session_id, from_id)
    return {"sessionId": session_id, "currentBranch": branch, "branchedFrom": from_id}


async def _handle_get_tree(service: ChatService, payload: Dict[str, Any]) -> Dict[str, Any]:
    from_id = payload.get("fromMessageId")
    view = service.store.get_tree(
        _require(payload, "sessionId"),
        from_id if isinstance(from_id, str) and from_id else None,
    )
    return {
        "sessionId": view.session_id,
        "tree": to_wire(view.tree),
        "currentBranch": view.active_branch,
        "createdAt": view.created_at.isoformat(),
    }


async def _handle_get_stats(service: ChatService, payload: Dict[str, Any]) -> Dict[str, Any]:
    session_id = _require(payload, "sessionId")
    stats = service.store.get_branch_stats(session_id)
    return {"sessionId": session_id, **to_wire(stats)}


async def _handle_main_branch(service: ChatService, payload: Dict[str, Any]) -> Dict[str, Any]:
    session_id = _require(payload, "sessionId")
    return {"sessionId": session_id, "currentBranch": service.store.switch_to_main_branch(session_id)}


async def _handle_search(service: ChatService, payload: Dict[str, Any]) -> Dict[str, Any]:
    session_id = _require(payload, "sessionId")
    term = payload.get("term")
    return {"sessionId": session_id, "matches": service.store.search(session_id, term)}


HANDLERS: Dict[str, Handler] = {
    "health": _handle_health,
    "create_session": _handle_create_session,
    "chat": _handle_chat,
    "regenerate": _handle_regenerate,
    "get_session": _handle_get_session,
    "branch": _handle_branch,
    "get_tree": _handle_get_tree,
    "get_stats": _handle_get_stats,
    "main_branch": _handle_main_branch,
    "search": _handle_search,
}


async def handle_request(service: ChatService, data: Dict[str, Any]) -> dict:
    command = data.get("type")
    request_id = data.get("id")
    handler = HANDLERS.get(command) if isinstance(command, str) else None
    if handler is None:
        name = command if isinstance(command, str) and command else "unknown"
        return _error(name, "Unknown message type", request_id)

    try:
        result = await handler(service, data)
    except ValidationError as exc:
        return _error(command, str(exc), request_id, code="validation_error")
    except SessionNotFound:
        return _error(command, "Session not found", request_id, code="session_not_found")
    except MessageNotFound:
        return _error(command, "Message not found", request_id, code="message_not_found")
    except CollaboratorError as exc:
        logger.warning("%s failed: %s", command, exc)
        extra: Dict[str, Any] = {"kind": exc.kind}
        if exc.user_message_id:
            extra["userMessageId"] = exc.user_message_id
        if exc.details:
            extra["details"] = exc.details
        return _error(command, str(exc), request_id, code="collaborator_error", extra=extra)
    except StoreError as exc:
        logger.error("%s failed: %s", command, exc)
        return _error(command, str(exc), request_id, code="store_error")
    except Exception as exc:
        logger.exception("%s failed unexpectedly", command)
        return _error(command, str(exc), request_id, code="internal_error")
    return _success(command, request_id, result)


async def _read_lines(service: ChatService) -> None:
    while True:
        # Read off the loop so label tasks keep running between requests.
        line = await asyncio.to_thread(sys.stdin.readline)
        if not line:
            break
        line = line.strip()
        if not line:
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as exc:
            _emit(_error("unknown", f"Invalid JSON: {exc.msg}"))
            continue
        if not isinstance(data, dict):
            _emit(_error("unknown", "Request must be a JSON object"))
            continue
        _emit(await handle_request(service, data))
    await service.drain_labels()


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    service = create_chat_service(settings)
    asyncio.run(_read_lines(service))


if __name__ == "__main__":
    main()
