from __future__ import annotations

from datetime import datetime

from hotdesk.core.entities.offering import ExpandedOffering as CoreExpandedOffering
from hotdesk.core.entities.offering import Offering as CoreOffering
from hotdesk.core.repositories.data_store import DataStore
from hotdesk.core.use_cases.offer_workspace import (
    CancelOfferingUseCase,
    CreateOfferingUseCase,
    UpdateOfferingUseCase,
)
from hotdesk.core.use_cases.workspace_locks import workspace_locks
from hotdesk.schemas.models import ExpandedOffering, Offering, OfferingCreate, OfferingUpdate
from hotdesk.services.window_queries import list_windows


def to_offering_schema(offering: CoreOffering | CoreExpandedOffering) -> Offering | ExpandedOffering:
    if isinstance(offering, CoreExpandedOffering):
        return ExpandedOffering(
            **to_offering_schema(offering.offering).model_dump(),
            workspace_name=offering.workspace_name,
            user_name=offering.user_name,
            floor_id=offering.floor_id,
            floor_name=offering.floor_name,
        )
    return Offering(
        id=offering.id,
        workspace_id=offering.workspace_id,
        user_id=offering.user_id,
        start_time=offering.start_time,
        end_time=offering.end_time,
        cancelled=offering.cancelled,
        created_by=offering.created_by,
    )


def create_offering_service(body: OfferingCreate, store: DataStore) -> Offering:
    use_case = CreateOfferingUseCase(store=store, locks=workspace_locks)
    offering = use_case.execute(
        workspace_id=body.workspace_id,
        user_id=body.user_id,
        start=body.start_time,
        end=body.end_time,
        created_by=body.created_by,
    )
    return to_offering_schema(offering)


def get_offering_service(offering_id: str, store: DataStore, *, expanded: bool = False) -> Offering | ExpandedOffering:
    if expanded:
        return to_offering_schema(store.offerings.get_one_expanded(offering_id))
    return to_offering_schema(store.offerings.get_one(offering_id))


def list_offerings_service(
    store: DataStore,
    *,
    expanded: bool = False,
    user_id: str | None = None,
    workspace_id: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Offering | ExpandedOffering]:
    items = list_windows(
        store.offerings,
        expanded=expanded,
        user_id=user_id,
        workspace_id=workspace_id,
        start=start,
        end=end,
    )
    return [to_offering_schema(b) for b in items]


def update_offering_service(offering_id: str, body: OfferingUpdate, store: DataStore) -> Offering:
    use_case = UpdateOfferingUseCase(store=store, locks=workspace_locks)
    offering = use_case.execute(
        offering_id=offering_id,
        workspace_id=body.workspace_id,
        user_id=body.user_id,
        start=body.start_time,
        end=body.end_time,
        created_by=body.created_by,
        cancelled=body.cancelled,
    )
    return to_offering_schema(offering)


def cancel_offering_service(offering_id: str, store: DataStore) -> Offering:
    return to_offering_schema(CancelOfferingUseCase(store=store, locks=workspace_locks).execute(offering_id=offering_id))
