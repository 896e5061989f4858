"""Channel profile and subscription endpoints."""

from __future__ import annotations

from flask import Blueprint

from chaitube.api.deps import (
    current_user,
    get_subscription_service,
    json_response,
    require_auth,
    timing,
)
from chaitube.schemas import ChannelProfileSchema, SubscriptionSchema

bp = Blueprint("channels", __name__, url_prefix="/channels")

profile_schema = ChannelProfileSchema()
subscription_schema = SubscriptionSchema()


@bp.post("/<int:channel_id>/subscribe")
@timing
@require_auth
def subscribe(channel_id: int):
    """Follow a channel; repeating the call returns the existing edge."""

    edge = get_subscription_service().follow(current_user().id, channel_id)
    status = 201 if edge.created else 200
    return json_response({"data": subscription_schema.dump(edge)}, status=status)


@bp.delete("/<int:channel_id>/subscribe")
@timing
@require_auth
def unsubscribe(channel_id: int):
    removed = get_subscription_service().unfollow(current_user().id, channel_id)
    return json_response({"data": {"removed": removed}})


@bp.get("/<string:username>")
@timing
@require_auth
def channel_profile(username: str):
    """Return the channel profile with counts and the viewer's subscription flag."""

    profile = get_subscription_service().channel_profile(username, current_user().id)
    return json_response({"data": profile_schema.dump(profile)})
