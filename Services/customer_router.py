# Services/customer_router.py
from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_serializer, model_validator
from typing import Annotated, Awaitable, Dict, List, Optional, Type, TypeVar
from datetime import datetime, timezone
from http import HTTPStatus
import logging
import re
from Services.customer_service import CustomerService
from Services.request_scope import run_bounded

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["customers"],
    responses={
        400: {"description": "Missing or malformed parameters"},
        500: {"description": "Store failure"},
    },
)

# The original clients call every endpoint with either verb
METHODS = ["GET", "POST"]

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

ModelT = TypeVar("ModelT", bound=BaseModel)
T = TypeVar("T")


# Pydantic models
def _utc_isoformat(value: datetime) -> str:
    # SQLite hands back naive timestamps, they are stored as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _integer_string(value):
    if isinstance(value, str):
        if not INTEGER_PATTERN.fullmatch(value):
            raise ValueError("id must be a base 10 integer")
        return int(value)
    return value


CustomerId = Annotated[
    int,
    BeforeValidator(_integer_string),
    Field(ge=INT64_MIN, le=INT64_MAX),
]


class CustomerResponse(BaseModel):
    id: int
    name: Optional[str]
    phone: str
    active: bool
    created: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created")
    def serialize_created(self, created: datetime) -> str:
        return _utc_isoformat(created)


class CustomerIdParams(BaseModel):
    id: CustomerId


class CustomerSaveParams(BaseModel):
    """
    Parameters of ``/customers.save``.

    Attributes:
        id: Customer to update, 0 creates a new one
        name: Display name
        phone: Unique phone number
    """
    id: CustomerId
    name: str = ""
    phone: str = ""

    @model_validator(mode="after")
    def require_name_or_phone(self):
        if not self.name and not self.phone:
            raise ValueError("name or phone is required")
        return self


# Helper functions
async def request_params(request: Request) -> Dict[str, str]:
    """Query parameters overlaid with form fields, form values winning."""
    params = dict(request.query_params)
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_TYPES):
        form = await request.form()
        params.update({key: value for key, value in form.items() if isinstance(value, str)})
    return params


def parse_params(model: Type[ModelT], params: Dict[str, str]) -> ModelT:
    try:
        return model.model_validate(params)
    except ValidationError as e:
        logger.warning(f"Rejected {model.__name__}: {e.errors(include_url=False)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=HTTPStatus.BAD_REQUEST.phrase
        )


async def customer_id_param(params: Dict[str, str] = Depends(request_params)) -> int:
    return parse_params(CustomerIdParams, params).id


async def save_params(params: Dict[str, str] = Depends(request_params)) -> CustomerSaveParams:
    return parse_params(CustomerSaveParams, params)


def get_customer_service(request: Request) -> CustomerService:
    return request.app.state.customer_service


async def bounded(request: Request, operation: Awaitable[T]) -> T:
    return await run_bounded(request, operation, request.app.state.settings.request_timeout)


# API Endpoints
@router.api_route("/customers.getById", methods=METHODS, response_model=CustomerResponse)
async def get_customer_by_id(
    request: Request,
    customer_id: int = Depends(customer_id_param),
    service: CustomerService = Depends(get_customer_service)
):
    return await bounded(request, service.by_id(customer_id))


@router.api_route("/customers.getAll", methods=METHODS, response_model=List[CustomerResponse])
async def get_all_customers(
    request: Request,
    service: CustomerService = Depends(get_customer_service)
):
    return await bounded(request, service.all())


@router.api_route("/customers.getAllActive", methods=METHODS, response_model=List[CustomerResponse])
async def get_all_active_customers(
    request: Request,
    service: CustomerService = Depends(get_customer_service)
):
    return await bounded(request, service.all_active())


@router.api_route("/customers.blockById", methods=METHODS, response_model=CustomerResponse)
async def block_customer(
    request: Request,
    customer_id: int = Depends(customer_id_param),
    service: CustomerService = Depends(get_customer_service)
):
    return await bounded(request, service.block_by_id(customer_id))


@router.api_route("/customers.unblockById", methods=METHODS, response_model=CustomerResponse)
async def unblock_customer(
    request: Request,
    customer_id: int = Depends(customer_id_param),
    service: CustomerService = Depends(get_customer_service)
):
    return await bounded(request, service.unblock_by_id(customer_id))


@router.api_route("/customers.removeById", methods=METHODS, response_model=CustomerResponse)
async def remove_customer(
    request: Request,
    customer_id: int = Depends(customer_id_param),
    service: CustomerService = Depends(get_customer_service)
):
    return await bounded(request, service.remove_by_id(customer_id))


@router.api_route("/customers.save", methods=METHODS, response_model=CustomerResponse)
async def save_customer(
    request: Request,
    params: CustomerSaveParams = Depends(save_params),
    service: CustomerService = Depends(get_customer_service)
):
    return await bounded(request, service.save(params.id, params.name, params.phone))
