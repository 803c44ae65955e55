"""Live location tracking - REST and websocket entry points"""

import json
import logging
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from proximity_gateway.api.v1.schemas import (
    LocationUpdateRequest,
    ProximityResultSchema,
    SubscriptionRequest,
    SubscriptionResponse,
    SubscriptionSettings,
)
from proximity_gateway.api.dependencies import get_tracker
from proximity_gateway.domain.models import LocationUpdate
from proximity_gateway.domain.tracking import ProximityTracker
from proximity_gateway.domain.exceptions import InvalidSubscriptionError

router = APIRouter()


def _to_update(body: LocationUpdateRequest) -> LocationUpdate:
    return LocationUpdate(**body.model_dump())


@router.post("/tracking/{user_id}/location", response_model=ProximityResultSchema)
async def update_location(
    user_id: str,
    body: LocationUpdateRequest,
    tracker: ProximityTracker = Depends(get_tracker),
):
    """
    Report the user's position.

    Returns the nearby payment location, if any. A push notification may be
    sent as a side effect; its outcome never changes the response.
    """
    result = await tracker.update_location(user_id, _to_update(body))
    return ProximityResultSchema.model_validate(result)


@router.post("/tracking/subscribe", response_model=SubscriptionResponse)
def subscribe(
    body: SubscriptionRequest,
    tracker: ProximityTracker = Depends(get_tracker),
):
    """Enable or disable live tracking for a user"""
    try:
        ack = tracker.subscribe(body.user_id, body.enabled, body.update_frequency, body.proximity_radius)
    except InvalidSubscriptionError as e:
        logging.warning(f"Invalid subscription: {e}", extra={"user_id": body.user_id})
        raise HTTPException(status_code=422, detail=str(e))

    return SubscriptionResponse(success=ack.success, message=ack.message)


@router.delete("/tracking/{user_id}", response_model=SubscriptionResponse)
def unsubscribe(user_id: str, tracker: ProximityTracker = Depends(get_tracker)):
    """Stop tracking a user and drop their live state"""
    tracker.unsubscribe(user_id)
    return SubscriptionResponse(success=True, message="Location tracking disabled successfully")


async def _send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({"event": "error", "data": {"message": message}})


@router.websocket("/tracking/ws/{user_id}")
async def tracking_socket(
    websocket: WebSocket,
    user_id: str,
    tracker: ProximityTracker = Depends(get_tracker),
):
    """
    Push-style tracking channel.

    Client events:
        {"event": "location:update", "data": {latitude, longitude, ...}}
        {"event": "location:subscribe", "data": {enabled, update_frequency?, proximity_radius?}}

    Server events: "proximity:result", "subscription:ack", "error".
    Closing the socket stops tracking the user.
    """
    await websocket.accept()
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))

            text = frame.get("text")
            if text is None:
                await _send_error(websocket, "Message must be a text frame")
                continue

            try:
                message = json.loads(text)
            except ValueError:
                await _send_error(websocket, "Message must be JSON")
                continue

            if not isinstance(message, dict):
                await _send_error(websocket, "Message must be a JSON object")
                continue

            event = message.get("event")
            data = message.get("data") or {}

            if event == "location:update":
                try:
                    body = LocationUpdateRequest.model_validate(data)
                except ValidationError:
                    await _send_error(websocket, "Invalid location update")
                    continue

                result = await tracker.update_location(user_id, _to_update(body))
                await websocket.send_json(
                    {
                        "event": "proximity:result",
                        "data": ProximityResultSchema.model_validate(result).model_dump(mode="json"),
                    }
                )

            elif event == "location:subscribe":
                try:
                    body = SubscriptionSettings.model_validate(data)
                    ack = tracker.subscribe(user_id, body.enabled, body.update_frequency, body.proximity_radius)
                except (ValidationError, InvalidSubscriptionError) as e:
                    await _send_error(websocket, f"Invalid subscription: {e}")
                    continue

                await websocket.send_json(
                    {"event": "subscription:ack", "data": {"success": ack.success, "message": ack.message}}
                )

            else:
                await _send_error(websocket, f"Unknown event: {event}")

    except WebSocketDisconnect:
        logging.info("Tracking socket closed", extra={"user_id": user_id})
    finally:
        tracker.disconnect(user_id)
