"""
Sample pet function.

The handler faults unconditionally by default so that the fault
interceptor always has something to contain; switch ``always_fault`` off
to get the plain-text welcome response instead.
"""

from http import HTTPStatus
from typing import Callable

from ..exceptions import HandlerFault
from ..observability import get_logger
from ..openapi import OperationDescriptor, OperationRegistry, ResponseOutcome, Visibility
from ..pipeline import Request, Response

logger = get_logger(__name__)

FUNCTION_ROUTE = 'Function1'

UPDATE_PET = OperationDescriptor(
    operation_id='updatePet',
    route=FUNCTION_ROUTE,
    methods=('get', 'post'),
    tags=('pet',),
    summary='Update an existing pet',
    description='This updates an existing pet.',
    visibility=Visibility.IMPORTANT,
    responses=(
        ResponseOutcome(
            status_code=HTTPStatus.OK,
            content_type='application/json',
            body_type='string',
            summary='Pet details updated',
            description='Pet details updated'
        ),
        ResponseOutcome(
            status_code=HTTPStatus.BAD_REQUEST,
            summary='Invalid ID supplied',
            description='Invalid ID supplied'
        ),
        ResponseOutcome(
            status_code=HTTPStatus.NOT_FOUND,
            summary='Pet not found',
            description='Pet not found'
        ),
        ResponseOutcome(
            status_code=HTTPStatus.METHOD_NOT_ALLOWED,
            summary='Validation exception',
            description='Validation exception'
        ),
    )
)


def make_update_pet(always_fault: bool = True) -> Callable[[Request], Response]:
    """
    Build the update-pet handler.

    Args:
        always_fault: Raise HandlerFault("Ooops") on every call

    Returns:
        Handler taking a Request and returning a Response
    """

    def update_pet(request: Request) -> Response:
        if always_fault:
            raise HandlerFault("Ooops")

        logger.info("HTTP trigger function processed a request.", extra={'method': request.method})

        response = request.create_response(HTTPStatus.OK)
        response.set_header('Content-Type', 'text/plain; charset=utf-8')
        return response.write_string("Welcome to the function gateway!")

    return update_pet


def build_registry(update_pet: Callable[[Request], Response]) -> OperationRegistry:
    """Register every documented handler; the caller freezes the result."""
    registry = OperationRegistry()
    registry.register(update_pet, UPDATE_PET)
    return registry
