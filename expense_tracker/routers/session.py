from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from starlette import status

from expense_tracker.core.config import Settings
from expense_tracker.models.user import LoginIn, ProfileUpdate, RegistrationIn, UserOut
from expense_tracker.services.analytics_utils import total_spent
from expense_tracker.services.budget_utils import check_budget
from expense_tracker.services.expense_list import ExpenseListController
from expense_tracker.services.session import Session

router = APIRouter(prefix="/session", tags=["session"])

# Dependencies -----------------------------------------------------


def get_session(request: Request) -> Session:
    return request.app.state.session


def get_controller(request: Request) -> ExpenseListController:
    return request.app.state.expenses


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_user(session: Session = Depends(get_session)) -> Session:
    if not session.is_authenticated:
        raise HTTPException(status_code=401, detail="not logged in")
    return session


# Response Models ---------------------------------------------------
class SessionOut(BaseModel):
    user: UserOut
    token: Optional[str] = None


class ProfileOut(BaseModel):
    user: UserOut
    alert: Optional[Dict[str, Any]] = None


# Routes -----------------------------------------------------------
@router.post("/login", response_model=SessionOut, summary="Log in with email and password")
async def login(payload: LoginIn, session: Session = Depends(get_session)):
    user = await session.login(payload.email, payload.password)
    return SessionOut(user=user.public(), token=session.token)


@router.post(
    "/register",
    response_model=SessionOut,
    status_code=201,
    summary="Create an account and log in",
)
async def register(payload: RegistrationIn, session: Session = Depends(get_session)):
    user = await session.register(payload)
    return SessionOut(user=user.public(), token=session.token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Log out")
async def logout(session: Session = Depends(get_session)):
    await session.logout()
    return None


@router.get("", response_model=SessionOut, summary="Current user")
async def current_user(session: Session = Depends(require_user)):
    return SessionOut(user=session.user.public(), token=session.token)


@router.patch(
    "/profile", response_model=ProfileOut, summary="Update profile fields or budget"
)
async def update_profile(
    payload: ProfileUpdate,
    session: Session = Depends(require_user),
    controller: ExpenseListController = Depends(get_controller),
    settings: Settings = Depends(get_app_settings),
):
    user = await session.update_profile(payload)
    alert = None
    if payload.budget is not None:
        # re-check spending against the new budget right away
        alert = check_budget(
            total_spent(controller.expenses), user.budget, settings.budget_warning_ratio
        )
    return ProfileOut(user=user.public(), alert=alert)
