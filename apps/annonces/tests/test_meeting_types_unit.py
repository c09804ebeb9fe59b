import pytest

from apps.annonces.enums import MeetingMode, meeting_type_aliases
from apps.core.config import settings


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Présentiel", MeetingMode.PRESENTIEL),
        ("presentiel", MeetingMode.PRESENTIEL),
        ("PRESENTIEL", MeetingMode.PRESENTIEL),
        ("Visioconférence", MeetingMode.VISIOCONFERENCE),
        ("Visioconference", MeetingMode.VISIOCONFERENCE),
        ("Présentiel ou visioconférence", MeetingMode.BOTH),
        ("Presentiel ou visioconference", MeetingMode.BOTH),
        ("Presentiel-ou-visioconference", MeetingMode.BOTH),
        ("Téléphone", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_accepts_accented_and_ascii_spellings(raw, expected):
    assert MeetingMode.parse(raw) is expected


def test_both_satisfies_either_mode():
    assert MeetingMode.PRESENTIEL.accepts(MeetingMode.BOTH)
    assert MeetingMode.VISIOCONFERENCE.accepts(MeetingMode.BOTH)
    assert MeetingMode.PRESENTIEL.accepts(MeetingMode.PRESENTIEL)
    assert not MeetingMode.PRESENTIEL.accepts(MeetingMode.VISIOCONFERENCE)
    assert not MeetingMode.VISIOCONFERENCE.accepts(None)


def test_alias_table_read_from_yaml(tmp_path, monkeypatch):
    path = tmp_path / "meeting_types.yml"
    path.write_text(
        "meeting_types:\n"
        "  presentiel: [En personne]\n"
        "  visioconference: [A distance]\n"
        "  teleportation: [Beam]\n",
        encoding="utf-8",
    )
    monkeypatch.setattr(settings, "meeting_types_path", str(path))

    assert MeetingMode.parse("En personne") is MeetingMode.PRESENTIEL
    assert MeetingMode.parse("à distance") is MeetingMode.VISIOCONFERENCE
    # canonical names always resolve, unknown modes are skipped
    assert MeetingMode.parse("both") is MeetingMode.BOTH
    assert MeetingMode.parse("Beam") is None


def test_missing_yaml_falls_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "meeting_types_path", str(tmp_path / "absent.yml"))
    aliases = meeting_type_aliases()
    assert aliases["presentiel ou visioconference"] is MeetingMode.BOTH
    assert aliases["visioconference"] is MeetingMode.VISIOCONFERENCE
