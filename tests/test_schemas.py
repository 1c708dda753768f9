"""
Request schema validation (no storage needed).
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from shutterclub_shared.schemas.competitions import (
    CompetitionCreateRequest,
    CompetitionUpdateRequest,
)
from shutterclub_shared.schemas.organizations import OrganizationUpdateRequest
from shutterclub_shared.schemas.photos import PhotoCreateRequest, PhotoUpdateRequest
from shutterclub_shared.schemas.ratings import RatingRequest
from shutterclub_shared.schemas.users import BioUpdateRequest, UsernameUpdateRequest


class TestUsernameUpdateRequest:
    def test_valid(self):
        assert UsernameUpdateRequest(username="bird_watcher-1").username == "bird_watcher-1"

    @pytest.mark.parametrize("username", ["ab", "x" * 31, "has space", "dots.not.allowed"])
    def test_invalid(self, username):
        with pytest.raises(ValidationError):
            UsernameUpdateRequest(username=username)


class TestBioUpdateRequest:
    def test_limits(self):
        BioUpdateRequest(bio="x" * 200)
        with pytest.raises(ValidationError):
            BioUpdateRequest(bio="x" * 201)
        with pytest.raises(ValidationError):
            BioUpdateRequest(bio="")


class TestRatingRequest:
    @pytest.mark.parametrize("value", [-0.1, 5.1])
    def test_out_of_range(self, value):
        with pytest.raises(ValidationError):
            RatingRequest(rating=value)

    def test_competition_rating_needs_competition(self):
        with pytest.raises(ValidationError):
            RatingRequest(rating=3, is_competition_rating=True)

    def test_general_rating_drops_competition(self):
        req = RatingRequest(rating=3, competition_id=7)
        assert req.competition_id is None


class TestPartialUpdates:
    def test_only_sent_fields_change(self):
        req = PhotoUpdateRequest(title="Egret")
        assert req.changes() == {"title": "Egret"}

    def test_explicit_null_detaches_gallery(self):
        assert PhotoUpdateRequest(gallery_id=None).changes() == {"gallery_id": None}

    def test_null_for_required_column_rejected(self):
        with pytest.raises(ValidationError):
            PhotoUpdateRequest(title=None)
        with pytest.raises(ValidationError):
            OrganizationUpdateRequest(name=None)


class TestCompetitionDates:
    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            CompetitionCreateRequest(
                name="Spring",
                start_date="2026-05-01T00:00:00Z",
                end_date="2026-04-01T00:00:00Z",
            )

    def test_mixed_offsets_compared_in_utc(self):
        # 10:00+05:00 is 05:00Z, an hour before the naive 06:00 end
        req = CompetitionCreateRequest(
            name="Spring",
            start_date="2026-05-01T10:00:00+05:00",
            end_date="2026-05-01T06:00:00",
        )
        assert req.end_date.tzinfo is None

        with pytest.raises(ValidationError):
            CompetitionCreateRequest(
                name="Spring",
                start_date="2026-05-01T06:00:00",
                end_date="2026-05-01T10:00:00+05:00",
            )

    def test_start_optional(self):
        req = CompetitionCreateRequest(name="Spring")
        assert req.start_date is None
        assert req.is_active is True

    def test_update_rejects_null_name(self):
        with pytest.raises(ValidationError):
            CompetitionUpdateRequest(name=None)


class TestPhotoCreateRequest:
    def test_image_url_must_be_http(self):
        with pytest.raises(ValidationError):
            PhotoCreateRequest(title="x", image_url="ftp://example.com/x.jpg")
