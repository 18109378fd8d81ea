"""Shopping, wishlist, trip and template repositories on the local backend."""

from __future__ import annotations

import pytest

from family_logistics.models.enums import TripMemberRole, TripStatus, WishlistVisibility
from family_logistics.models.shopping import CreateShoppingItemDto, CreateShoppingListDto
from family_logistics.models.template import (
    CreatePackingTemplateDto,
    CreatePackingTemplateItemDto,
)
from family_logistics.models.trip import CreateTripDto
from family_logistics.models.wishlist import (
    CreateWishlistItemDto,
    ReserveWishlistItemDto,
    UpdateWishlistDto,
)
from family_logistics.repositories.errors import AUTH_REQUIRED, NOT_FOUND


class TestShopping:
    async def test_list_owner_is_stamped(self, mock_repos, signed_in):
        created = await mock_repos["shopping_lists"].create(
            CreateShoppingListDto(household_id="h1", title="Groceries")
        )
        assert created.data.created_by == signed_in

    async def test_create_without_session_writes_nothing(self, mock_repos):
        lists = mock_repos["shopping_lists"]
        result = await lists.create(CreateShoppingListDto(household_id="h1", title="Groceries"))

        assert result.error.code == AUTH_REQUIRED
        assert await lists.engine.storage.get("table:shopping_lists") is None

    async def test_lists_newest_first(self, mock_repos, signed_in):
        lists = mock_repos["shopping_lists"]
        first = (await lists.create({"household_id": "h1", "title": "A"})).data
        second = (await lists.create({"household_id": "h1", "title": "B"})).data
        await lists.create({"household_id": "h2", "title": "C"})

        found = await lists.find_by_household_id("h1")
        assert [l.id for l in found.data] == [second.id, first.id]

    async def test_toggle_purchased_records_buyer(self, mock_repos, signed_in):
        items = mock_repos["shopping_items"]
        item = (await items.create(CreateShoppingItemDto(list_id="l1", title="Milk"))).data
        assert item.added_by == signed_in

        bought = (await items.toggle_purchased(item.id, True, signed_in)).data
        assert bought.is_purchased
        assert bought.purchased_by == signed_in
        assert bought.purchased_at is not None

        reopened = (await items.toggle_purchased(item.id, False)).data
        assert not reopened.is_purchased
        assert reopened.purchased_by is None
        assert reopened.purchased_at is None


@pytest.fixture
async def household(mock_repos, signed_in):
    return (await mock_repos["households"].create_with_owner("Home", "Ana")).data


class TestWishlists:
    async def test_create_resolves_membership(self, mock_repos, household, signed_in):
        wishlist = (await mock_repos["wishlists"].create({"title": "Birthday"})).data

        assert wishlist.user_id == signed_in
        assert wishlist.household_id == household.id
        assert wishlist.visibility == WishlistVisibility.PRIVATE
        assert wishlist.is_public is False
        assert len(wishlist.share_slug) == 8

    async def test_legacy_public_flag(self, mock_repos, household):
        wishlist = (
            await mock_repos["wishlists"].create({"title": "Birthday", "is_public": True})
        ).data
        assert wishlist.visibility == WishlistVisibility.PUBLIC
        assert wishlist.is_public is True

    async def test_create_requires_household(self, mock_repos, signed_in):
        result = await mock_repos["wishlists"].create({"title": "Birthday"})
        assert result.error.message == "User must belong to a household to create wishlists"

    async def test_update_recomputes_is_public(self, mock_repos, household):
        wishlists = mock_repos["wishlists"]
        wishlist = (await wishlists.create({"title": "Birthday"})).data

        updated = (
            await wishlists.update(
                wishlist.id, UpdateWishlistDto(visibility=WishlistVisibility.PUBLIC)
            )
        ).data
        assert updated.visibility == WishlistVisibility.PUBLIC
        assert updated.is_public is True

        hidden = (
            await wishlists.update(
                wishlist.id, UpdateWishlistDto(visibility=WishlistVisibility.HOUSEHOLD)
            )
        ).data
        assert hidden.is_public is False

    async def test_find_by_slug_only_public(self, mock_repos, household):
        wishlists = mock_repos["wishlists"]
        public = (
            await wishlists.create({"title": "Open", "visibility": "public"})
        ).data
        private = (await wishlists.create({"title": "Closed"})).data

        assert (await wishlists.find_by_slug(public.share_slug)).data.id == public.id
        hidden = await wishlists.find_by_slug(private.share_slug)
        assert hidden.error.message == "Wishlist not found"
        assert hidden.error.code == NOT_FOUND

    async def test_reserve_and_release(self, mock_repos, household):
        wishlist = (
            await mock_repos["wishlists"].create({"title": "Open", "visibility": "public"})
        ).data
        items = mock_repos["wishlist_items"]
        item = (
            await items.create(CreateWishlistItemDto(wishlist_id=wishlist.id, title="Lego"))
        ).data

        reserved = (
            await items.reserve_item(
                item.id,
                ReserveWishlistItemDto(is_reserved=True, reserved_by_name="Grandma"),
            )
        ).data
        assert reserved.is_reserved
        assert len(reserved.reservation_code) == 4

        wrong = await items.reserve_item(
            item.id, ReserveWishlistItemDto(is_reserved=False, reservation_code="nope")
        )
        assert wrong.error.message == "Invalid reservation code"
        assert (await items.find_by_id(item.id)).data.is_reserved

        released = (
            await items.reserve_item(
                item.id,
                ReserveWishlistItemDto(
                    is_reserved=False, reservation_code=reserved.reservation_code
                ),
            )
        ).data
        assert not released.is_reserved
        assert released.reserved_by_name is None


class TestTrips:
    async def test_own_then_shared(self, mock_repos, signed_in):
        trips = mock_repos["trips"]
        mine = (await trips.create(CreateTripDto(name="Paris", start_date="2026-05-01"))).data
        other = (
            await trips.create(
                CreateTripDto(name="Rome", start_date="2026-01-01", created_by="bob")
            )
        ).data
        await mock_repos["trip_members"].invite(other.id, signed_in, TripMemberRole.EDITOR)

        found = await trips.find_by_user_id(signed_in)
        assert [t.id for t in found.data] == [mine.id, other.id]

    async def test_undated_trips_list_last(self, mock_repos, signed_in):
        trips = mock_repos["trips"]
        undated = (await trips.create(CreateTripDto(name="Someday"))).data
        dated = (await trips.create(CreateTripDto(name="Paris", start_date="2026-05-01"))).data

        found = await trips.find_by_user_id(signed_in)
        assert [t.id for t in found.data] == [dated.id, undated.id]

    async def test_duplicate(self, mock_repos, signed_in):
        trips = mock_repos["trips"]
        trip = (
            await trips.create(
                CreateTripDto(name="Paris", start_date="2026-05-01", status=TripStatus.BOOKED)
            )
        ).data

        copy = (await trips.duplicate(trip)).data
        assert copy.id != trip.id
        assert copy.name == "Copy of Paris"
        assert copy.start_date == "2026-05-01"
        assert copy.status == TripStatus.PLANNING

    async def test_share_by_email(self, mock_repos, signed_in):
        auth = mock_repos["mock_auth"]
        bob = (await auth.sign_up("bob@example.com", "pw")).data
        await auth.sign_in("ana@example.com", "s3cret-pass")

        shared = await mock_repos["trip_members"].invite_by_email(
            "t1", "bob@example.com", current_user_id=signed_in
        )
        assert shared.data.user_id == bob.id
        assert shared.data.role == TripMemberRole.VIEWER

        members = await mock_repos["trip_members"].find_by_trip_id("t1")
        assert [m.email for m in members.data] == ["bob@example.com"]


class TestTemplates:
    async def test_apply_to_trip(self, mock_repos, signed_in):
        templates = mock_repos["templates"]
        template = (await templates.create(CreatePackingTemplateDto(name="Beach"))).data
        assert template.created_by == signed_in
        for title in ("Towel", "Sunscreen"):
            await templates.items.create(
                CreatePackingTemplateItemDto(template_id=template.id, title=title)
            )

        applied = await templates.apply_to_trip(template.id, "t1", mock_repos["packing_items"])
        assert sorted(item.title for item in applied.data) == ["Sunscreen", "Towel"]

        packing = await mock_repos["packing_items"].find_by_trip_id("t1")
        assert [item.title for item in packing.data] == ["Sunscreen", "Towel"]

    async def test_apply_empty_template(self, mock_repos, signed_in):
        template = (
            await mock_repos["templates"].create(CreatePackingTemplateDto(name="Empty"))
        ).data
        applied = await mock_repos["templates"].apply_to_trip(
            template.id, "t1", mock_repos["packing_items"]
        )
        assert applied.data == []

    async def test_delete_removes_items(self, mock_repos, signed_in):
        templates = mock_repos["templates"]
        template = (await templates.create(CreatePackingTemplateDto(name="Ski"))).data
        await templates.items.create(
            CreatePackingTemplateItemDto(template_id=template.id, title="Gloves")
        )

        assert (await templates.delete(template.id)).error is None
        assert (await templates.items.find_by_template_id(template.id)).data == []
        assert (await templates.find_by_id(template.id)).error.code == NOT_FOUND
