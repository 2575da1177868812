"""
Endpoints shared by every wizard flow.

A FlowDefinition names the pieces that differ between flows (state manager,
review validator, step forms, routes, submission mapping); FlowApi turns it
into the step, child, review, submit, confirmation and clear endpoints.

Every navigation outcome is a 303 to the page resolved from its route id.
Step input problems are a 422 carrying field-keyed errors.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, Type
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse

from database.session_store import HttpSession
from database.state_lifecycle import StateLifecycleManager, utc_now
from domain.dtos import BenefitApplicationDto
from domain.results import ReviewOutcome, ReviewRedirect, RouteTarget, is_redirect
from domain.state import SubmissionInfoState, WizardState
from services.benefit_application_service import BenefitApplicationService
from services.logging_config import FlowLogger, get_logger
from validation.navigation import (
    get_single_child,
    guard_submitted,
    load_for_review,
    next_step_target,
    add_child,
    remove_child,
)
from validation.review_rules import flow_params
from validation.step_schemas import StepContext, StepErrors, StepForm, child_state_update, validate_step
from web.csrf import verify_csrf
from web.dependencies import get_benefit_application_service, get_http_session
from web.routes import DEFAULT_LANG, redirect_to

logger = get_logger(__name__)

# Returns extra state fields for a valid form, or errors to report instead
StepEnricher = Callable[[StepForm, WizardState], Awaitable[Tuple[Dict[str, Any], StepErrors]]]

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def step_errors_response(errors: StepErrors) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"errors": errors})


async def read_form_data(request: Request) -> Dict[str, Any]:
    """Submitted fields from a form post or a JSON body."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        data: Dict[str, Any] = {}
        for key in form.keys():
            values = form.getlist(key)
            data[key] = values if len(values) > 1 else values[0]
        return data

    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed request body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Expected a JSON object")
    return body


@dataclass(frozen=True)
class FlowDefinition:
    name: str
    manager_dependency: Callable[..., StateLifecycleManager]
    validator: Callable[[Any], ReviewOutcome]
    review_route: Callable[[Any], str]
    confirmation_route: Callable[[Any], str]
    first_route: Callable[[Any], str]
    to_dto: Callable[[Any], BenefitApplicationDto]
    steps: Mapping[str, Type[StepForm]]
    child_steps: Mapping[str, Type[StepForm]] = field(default_factory=dict)
    children_index_route: Optional[Callable[[Any], str]] = None
    child_entry_route: Optional[Callable[[Any], str]] = None
    # Set for flows where the user adds and removes children
    child_model: Optional[type] = None
    applicant_sin: Callable[[Any], Optional[str]] = lambda state: None


class FlowApi:
    """Generic endpoints for one flow."""

    def __init__(self, definition: FlowDefinition):
        self.definition = definition
        self.log = FlowLogger(definition.name)

    # -------------------------------------------------------------------------
    # Navigation helpers
    # -------------------------------------------------------------------------

    def params(self, state: WizardState) -> Dict[str, str]:
        return flow_params(state.id)

    def review_target(self, state: WizardState) -> RouteTarget:
        return RouteTarget(self.definition.review_route(state), self.params(state))

    def guard(self, state: WizardState, current_route: str) -> Optional[RouteTarget]:
        blocked = guard_submitted(
            state,
            current_route,
            self.definition.confirmation_route(state),
            self.definition.first_route(state),
            self.params(state),
        )
        if blocked is not None:
            self.log.redirected("submission-guard", blocked.route_id)
        return blocked

    def step_context(self, manager: StateLifecycleManager, state: WizardState) -> StepContext:
        return StepContext(settings=manager.settings, applicant_sin=self.definition.applicant_sin(state))

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    async def handle_step(
        self,
        flow_id: str,
        step: str,
        data: Mapping[str, Any],
        session: HttpSession,
        manager: StateLifecycleManager,
        lang: str,
        enrich: Optional[StepEnricher] = None,
    ) -> Response:
        form_class = self.definition.steps.get(step)
        if form_class is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown step: {step}")

        state = await manager.load(flow_id, session)
        blocked = self.guard(state, f"{self.definition.name}/steps/{step}")
        if blocked is not None:
            return redirect_to(blocked, lang)

        context = self.step_context(manager, state)
        result = validate_step(form_class, data, context)
        if not result.ok:
            self.log.step_rejected(step, result.errors)
            return step_errors_response(result.errors)

        update = result.value.to_state_update(state, context)
        partial = dict(update.partial)
        if enrich is not None:
            extra, errors = await enrich(result.value, state)
            if errors:
                self.log.step_rejected(step, errors)
                return step_errors_response(errors)
            partial.update(extra)

        state = await manager.save(flow_id, session, partial, update.fields_to_remove)
        target = next_step_target(state, self.definition.validator, self.review_target(state))
        self.log.step_saved(step, target.route_id)
        return redirect_to(target, lang)

    async def handle_child_step(
        self,
        flow_id: str,
        child_id: str,
        step: str,
        data: Mapping[str, Any],
        session: HttpSession,
        manager: StateLifecycleManager,
        lang: str,
    ) -> Response:
        form_class = self.definition.child_steps.get(step)
        if form_class is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown child step: {step}")

        state = await manager.load(flow_id, session)
        blocked = self.guard(state, f"{self.definition.name}/children/steps/{step}")
        if blocked is not None:
            return redirect_to(blocked, lang)

        single = get_single_child(state, child_id, self.definition.children_index_route(state), self.params(state))
        if isinstance(single, ReviewRedirect):
            return redirect_to(single.target, lang)

        result = validate_step(form_class, data, self.step_context(manager, state))
        if not result.ok:
            self.log.step_rejected(f"children/{step}", result.errors)
            return step_errors_response(result.errors)

        update = child_state_update(state.children, single.child.id, result.value.to_child_fields())
        state = await manager.save(flow_id, session, update.partial)

        if single.edit_mode:
            target = self.review_target(state)
        else:
            outcome = self.definition.validator(state)
            target = outcome.target if is_redirect(outcome) else self.review_target(state)
        self.log.step_saved(f"children/{step}", target.route_id)
        return redirect_to(target, lang)

    # -------------------------------------------------------------------------
    # Router
    # -------------------------------------------------------------------------

    def register(self, router: APIRouter) -> None:
        """Add the generic endpoints to router."""
        definition = self.definition
        manager_dependency = definition.manager_dependency
        csrf = [Depends(verify_csrf)]

        @router.get("/{flow_id}/state")
        async def get_state(
            flow_id: str,
            lang: str = Query(DEFAULT_LANG),
            session: HttpSession = Depends(get_http_session),
            manager: StateLifecycleManager = Depends(manager_dependency),
        ):
            state = await manager.load(flow_id, session)
            blocked = self.guard(state, f"{definition.name}/state")
            if blocked is not None:
                return redirect_to(blocked, lang)
            return {"state": state.model_dump(mode="json")}

        @router.post("/{flow_id}/steps/{step}", dependencies=csrf)
        async def submit_step(
            flow_id: str,
            step: str,
            request: Request,
            lang: str = Query(DEFAULT_LANG),
            session: HttpSession = Depends(get_http_session),
            manager: StateLifecycleManager = Depends(manager_dependency),
        ):
            data = await read_form_data(request)
            return await self.handle_step(flow_id, step, data, session, manager, lang)

        if definition.child_steps:
            @router.post("/{flow_id}/children/{child_id}/steps/{step}", dependencies=csrf)
            async def submit_child_step(
                flow_id: str,
                child_id: str,
                step: str,
                request: Request,
                lang: str = Query(DEFAULT_LANG),
                session: HttpSession = Depends(get_http_session),
                manager: StateLifecycleManager = Depends(manager_dependency),
            ):
                data = await read_form_data(request)
                return await self.handle_child_step(flow_id, child_id, step, data, session, manager, lang)

        if definition.child_model is not None:
            @router.post("/{flow_id}/children", dependencies=csrf)
            async def create_child(
                flow_id: str,
                lang: str = Query(DEFAULT_LANG),
                session: HttpSession = Depends(get_http_session),
                manager: StateLifecycleManager = Depends(manager_dependency),
            ):
                state = await manager.load(flow_id, session)
                blocked = self.guard(state, f"{definition.name}/children")
                if blocked is not None:
                    return redirect_to(blocked, lang)

                state, child_id = await add_child(manager, flow_id, session, definition.child_model)
                logger.info(f"Child added; childId: [{child_id}]")
                target = RouteTarget(definition.child_entry_route(state), self.params(state))
                return redirect_to(target.with_params(childId=str(child_id)), lang)

            @router.post("/{flow_id}/children/{child_id}/remove", dependencies=csrf)
            async def delete_child(
                flow_id: str,
                child_id: str,
                lang: str = Query(DEFAULT_LANG),
                session: HttpSession = Depends(get_http_session),
                manager: StateLifecycleManager = Depends(manager_dependency),
            ):
                state = await manager.load(flow_id, session)
                blocked = self.guard(state, f"{definition.name}/children/remove")
                if blocked is not None:
                    return redirect_to(blocked, lang)

                index = RouteTarget(definition.children_index_route(state), self.params(state))
                single = get_single_child(state, child_id, index.route_id, index.params)
                if isinstance(single, ReviewRedirect):
                    return redirect_to(single.target, lang)

                await remove_child(manager, flow_id, session, single.child.id)
                logger.info(f"Child removed; childId: [{single.child.id}]")
                return redirect_to(index, lang)

        @router.get("/{flow_id}/review")
        async def review(
            flow_id: str,
            lang: str = Query(DEFAULT_LANG),
            session: HttpSession = Depends(get_http_session),
            manager: StateLifecycleManager = Depends(manager_dependency),
        ):
            state = await manager.load(flow_id, session)
            blocked = self.guard(state, f"{definition.name}/review")
            if blocked is not None:
                return redirect_to(blocked, lang)

            outcome = await load_for_review(manager, flow_id, session, definition.validator)
            if is_redirect(outcome):
                return redirect_to(outcome.target, lang)

            # Steps edited from the review page return straight to it
            if not state.edit_mode:
                await manager.save(flow_id, session, {"edit_mode": True})
            return {"review": outcome.state.model_dump(mode="json")}

        @router.post("/{flow_id}/submit", dependencies=csrf)
        async def submit(
            flow_id: str,
            lang: str = Query(DEFAULT_LANG),
            session: HttpSession = Depends(get_http_session),
            manager: StateLifecycleManager = Depends(manager_dependency),
            service: BenefitApplicationService = Depends(get_benefit_application_service),
        ):
            state = await manager.load(flow_id, session)
            blocked = self.guard(state, f"{definition.name}/submit")
            if blocked is not None:
                return redirect_to(blocked, lang)

            outcome = await load_for_review(manager, flow_id, session, definition.validator)
            if is_redirect(outcome):
                return redirect_to(outcome.target, lang)

            confirmation_code = await service.submit(definition.to_dto(outcome.state))
            state = await manager.save(flow_id, session, {
                "submission_info": SubmissionInfoState(confirmation_code=confirmation_code, submitted_on=utc_now()),
            })
            self.log.submitted()
            return redirect_to(RouteTarget(definition.confirmation_route(state), self.params(state)), lang)

        @router.get("/{flow_id}/confirmation")
        async def confirmation(
            flow_id: str,
            lang: str = Query(DEFAULT_LANG),
            session: HttpSession = Depends(get_http_session),
            manager: StateLifecycleManager = Depends(manager_dependency),
        ):
            state = await manager.load(flow_id, session)
            blocked = self.guard(state, definition.confirmation_route(state))
            if blocked is not None:
                return redirect_to(blocked, lang)
            return {
                "confirmationCode": state.submission_info.confirmation_code,
                "submittedOn": state.submission_info.submitted_on.isoformat(),
            }

        @router.post("/{flow_id}/clear", dependencies=csrf, status_code=status.HTTP_204_NO_CONTENT)
        async def clear(
            flow_id: str,
            session: HttpSession = Depends(get_http_session),
            manager: StateLifecycleManager = Depends(manager_dependency),
        ):
            await manager.clear(flow_id, session)
            return Response(status_code=status.HTTP_204_NO_CONTENT)


def start_target(route_id: str, flow_id: UUID) -> RouteTarget:
    return RouteTarget(route_id, flow_params(flow_id))
