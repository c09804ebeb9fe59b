from apps.annonces.enums import EsgFlag, MeetingMode, SortOrder
from apps.annonces.schemas.listing import Listing
from apps.annonces.services.repository import CandidateFilters, ListingRepository, MapBounds
from apps.annonces.services.search import (
    AnnonceSearchService,
    RadiusFilter,
    SearchQuery,
    filter_by_meeting_mode,
    filter_by_radius,
    filter_by_text,
)


def _listing(annonce_id, **steps):
    return Listing.model_validate({"id": annonce_id, **steps})


FISCAL = _listing(
    "fiscal",
    step0={"nom": "Dupont", "prenom": "Claire"},
    step1={"fonction": "Conseil fiscal", "domainesExpertise": ["Immobilier"]},
    step2={"accroche": "Expert en fiscalité"},
    step3={"latitude": 48.8566, "longitude": 2.3522, "ville": "Paris", "typeRdv": "Présentiel"},
    step4={"tarifHoraire": "120"},
)
LYON = _listing(
    "lyon",
    step1={"fonction": "Gestion de patrimoine", "domainesExpertise": ["Retraite"]},
    step3={"latitude": 45.7640, "longitude": 4.8357, "ville": "Lyon", "typeRdv": "Visioconférence"},
    step4={"tarifHoraire": 80, "propositionService": "Bilan patrimonial complet"},
)
NOWHERE = _listing(
    "nowhere",
    step1={"fonction": "Courtier"},
    step3={"typeRdv": "Presentiel-ou-visioconference"},
    step4={"tarifHoraire": "abc"},
)


class FakeRepository(ListingRepository):
    """Returns a fixed candidate list and records the filters it was given."""

    def __init__(self, listings):
        self.listings = listings
        self.filters = None

    def find_candidates(self, filters):
        self.filters = filters
        return list(self.listings)

    def list_published(self):
        return list(self.listings)

    def list_in_bounds(self, bounds):
        return []

    def get(self, annonce_id):
        return None

    def save_step(self, step_index, data, annonce_id=None, member_id=None):
        return annonce_id or "new"


def test_empty_text_keeps_every_candidate():
    candidates = [FISCAL, LYON, NOWHERE]
    assert filter_by_text(candidates, None) == candidates
    assert filter_by_text(candidates, "  ?! ") == candidates


def test_text_matches_tagline_after_accent_stripping():
    assert filter_by_text([FISCAL, LYON], "fiscalite") == [FISCAL]


def test_text_matches_each_searchable_field():
    assert filter_by_text([FISCAL, LYON], "Claire") == [FISCAL]
    assert filter_by_text([FISCAL, LYON], "lyon") == [LYON]
    assert filter_by_text([FISCAL, LYON], "retraite") == [LYON]
    assert filter_by_text([FISCAL, LYON], "bilan") == [LYON]
    assert filter_by_text([FISCAL, LYON], "120") == [FISCAL]
    assert filter_by_text([FISCAL, LYON], "visioconference") == [LYON]


def test_text_fuzzy_match_on_name():
    assert filter_by_text([FISCAL, LYON], "Duponf") == [FISCAL]


def test_text_without_match_gives_empty_list():
    assert filter_by_text([FISCAL, LYON, NOWHERE], "astrophysique") == []


def test_meeting_mode_filter():
    candidates = [FISCAL, LYON, NOWHERE]
    assert filter_by_meeting_mode(candidates, MeetingMode.PRESENTIEL) == [FISCAL, NOWHERE]
    assert filter_by_meeting_mode(candidates, MeetingMode.VISIOCONFERENCE) == [LYON, NOWHERE]
    assert filter_by_meeting_mode(candidates, None) == candidates


def test_radius_filter_drops_far_and_unlocated_listings():
    radius = RadiusFilter(lat=48.85, lng=2.35, rayon=50)
    assert filter_by_radius([FISCAL, LYON, NOWHERE], radius) == [FISCAL]


def test_radius_filter_inactive_on_zero_values():
    candidates = [FISCAL, LYON, NOWHERE]
    assert filter_by_radius(candidates, RadiusFilter(lat=48.85, lng=2.35, rayon=0)) == candidates
    assert filter_by_radius(candidates, RadiusFilter(lat=0, lng=2.35, rayon=50)) == candidates
    assert filter_by_radius(candidates, RadiusFilter(lat=48.85, lng=2.35)) == candidates
    assert filter_by_radius(candidates, None) == candidates


def test_candidate_filters_drop_sentinel_and_blank_domains():
    query = SearchQuery(fonction="empty", domaines=["", "Retraite"], esg=EsgFlag.YES)
    assert query.candidate_filters() == CandidateFilters(fonction=None, esg=EsgFlag.YES, domaines=["Retraite"])


def test_service_composes_every_stage():
    repository = FakeRepository([FISCAL, LYON, NOWHERE])
    service = AnnonceSearchService(repository)
    bounds = MapBounds(ne_lat=50, ne_lng=5, sw_lat=40, sw_lng=0)

    results = service.search(SearchQuery(
        fonction="Conseil fiscal",
        type_rdv=MeetingMode.PRESENTIEL,
        tri=SortOrder.PRICE_ASC,
        map_bounds=bounds,
    ))

    assert [r.id for r in results] == ["nowhere", "fiscal"]
    assert repository.filters.fonction == "Conseil fiscal"
    assert repository.filters.bounds == bounds


def test_service_returns_empty_list_without_candidates():
    service = AnnonceSearchService(FakeRepository([]))
    assert service.search(SearchQuery(texte="fiscalite")) == []


def test_meeting_mode_filter_loads_alias_table_once(monkeypatch):
    from apps.annonces import enums
    from apps.annonces.services import search

    calls = []

    def counting_aliases():
        calls.append(1)
        return enums.meeting_type_aliases()

    monkeypatch.setattr(search, "meeting_type_aliases", counting_aliases)

    candidates = [FISCAL, LYON, NOWHERE] * 5
    kept = filter_by_meeting_mode(candidates, MeetingMode.PRESENTIEL)

    assert kept == [FISCAL, NOWHERE] * 5
    assert len(calls) == 1


def test_whole_number_rate_is_searchable_without_decimal():
    listing = _listing("decimal", step4={"tarifHoraire": 80.0})
    assert "80" in listing.searchable_fields()
    assert "80.0" not in listing.searchable_fields()

    listing = _listing("half", step4={"tarifHoraire": 80.5})
    assert "80.5" in listing.searchable_fields()
