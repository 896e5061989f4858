"""User account and session endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from chaitube.api.deps import (
    clear_token_cookies,
    current_user,
    get_auth_service,
    get_identity_service,
    json_response,
    read_refresh_token,
    read_upload,
    require_auth,
    set_token_cookies,
    timing,
)
from chaitube.schemas import (
    ChangePasswordSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UpdateAccountSchema,
    UserSchema,
)
from chaitube.services.auth.dto import LoginIn, RefreshIn
from chaitube.services.identity.dto import (
    UserPasswordChangeIn,
    UserRegisterIn,
    UserUpdateIn,
)

bp = Blueprint("users", __name__, url_prefix="/users")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
change_password_schema = ChangePasswordSchema()
update_account_schema = UpdateAccountSchema()
user_schema = UserSchema()
token_schema = TokenPairSchema()


def _form_or_json() -> dict:
    if request.form:
        return request.form.to_dict()
    return request.get_json(silent=True) or {}


@bp.post("/register")
@timing
def register():
    """Create an account from form fields plus ``avatar``/``cover_image`` files."""

    payload = register_schema.load(_form_or_json())
    user = get_identity_service().register(
        UserRegisterIn(
            username=payload["username"],
            email=payload["email"],
            full_name=payload["full_name"],
            password=payload["password"],
            avatar=read_upload("avatar"),
            cover=read_upload("cover_image"),
        )
    )
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate by username or email and start a session."""

    data = login_schema.load(request.get_json(silent=True) or {})
    result = get_auth_service().login(
        LoginIn(password=data["password"], username=data["username"], email=data["email"])
    )
    body = {
        "data": {
            "user": user_schema.dump(result.user),
            **token_schema.dump(result.tokens),
        }
    }
    return set_token_cookies(json_response(body), result.tokens)


@bp.post("/logout")
@timing
@require_auth
def logout():
    """End the current session and clear both cookies."""

    get_auth_service().logout(current_user().id)
    return clear_token_cookies(json_response({"data": {}}))


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Exchange a refresh token (cookie first, then body) for a new pair."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    token = read_refresh_token(data["refresh_token"])
    pair = get_auth_service().refresh(RefreshIn(refresh_token=token))
    return set_token_cookies(json_response({"data": token_schema.dump(pair)}), pair)


@bp.post("/change-password")
@timing
@require_auth
def change_password():
    data = change_password_schema.load(request.get_json(silent=True) or {})
    get_identity_service().change_password(
        UserPasswordChangeIn(
            user_id=current_user().id,
            old_password=data["old_password"],
            new_password=data["new_password"],
        )
    )
    return json_response({"data": {}})


@bp.get("/current-user")
@timing
@require_auth
def get_current_user():
    return json_response({"data": user_schema.dump(current_user())})


@bp.patch("/update-account")
@timing
@require_auth
def update_account():
    """Update ``full_name`` and/or ``email`` of the current user."""

    data = update_account_schema.load(request.get_json(silent=True) or {})
    user = get_identity_service().update_profile(
        current_user().id,
        UserUpdateIn(full_name=data["full_name"], email=data["email"]),
    )
    return json_response({"data": user_schema.dump(user)})


@bp.patch("/avatar")
@timing
@require_auth
def update_avatar():
    user = get_identity_service().update_avatar(current_user().id, read_upload("avatar"))
    return json_response({"data": user_schema.dump(user)})


@bp.patch("/cover-image")
@timing
@require_auth
def update_cover_image():
    user = get_identity_service().update_cover(current_user().id, read_upload("cover_image"))
    return json_response({"data": user_schema.dump(user)})
