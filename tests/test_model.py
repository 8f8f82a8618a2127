"""Tests for the Model record."""

from translation_model_registry.model import Model


def _model(**kwargs: object) -> Model:
    fields = {
        "short_name": "deen.student.tiny11",
        "display_name": "German-English tiny",
        "source_language": "de",
        "target_language": "en",
        "type": "tiny",
    }
    fields.update(kwargs)
    return Model(**fields)  # type: ignore[arg-type]


class TestIdentity:
    """Tests for model identity."""

    def test_same_model_ignores_version_and_location(self) -> None:
        """Identity is short name, languages and type only."""
        local = _model(local_version=1.0, path="/models/a")
        remote = _model(remote_version=2.0, url="https://example.com/a.tar.gz")
        assert local.is_same_model(remote)

    def test_different_type_is_different_model(self) -> None:
        """Models differing only in type are different packages."""
        assert not _model(type="tiny").is_same_model(_model(type="base"))

    def test_empty_sentinel(self) -> None:
        """A model without path or url is the empty sentinel."""
        assert Model().is_empty
        assert not _model(path="/models/a").is_empty


class TestOutdated:
    """Tests for the outdated flag."""

    def test_newer_remote_version(self) -> None:
        """A higher remote version marks an installed model outdated."""
        assert _model(path="/m", local_version=1.0, remote_version=2.0).outdated

    def test_equal_version_is_not_outdated(self) -> None:
        """Equal versions are up to date."""
        assert not _model(path="/m", local_version=2.0, remote_version=2.0).outdated

    def test_missing_local_version_counts_as_zero(self) -> None:
        """An installed model without a version is older than any remote release."""
        assert _model(path="/m", remote_version=0.5).outdated

    def test_remote_only_model_is_never_outdated(self) -> None:
        """Only installed models can be outdated."""
        assert not _model(url="https://example.com/a", remote_version=3.0).outdated

    def test_no_remote_version(self) -> None:
        """Without remote information nothing is outdated."""
        assert not _model(path="/m", local_version=1.0).outdated


class TestOrderingAndCopies:
    """Tests for ordering and copies."""

    def test_sorted_by_display_name_case_insensitively(self) -> None:
        """Display names sort without regard to case."""
        models = [_model(display_name="spanish"), _model(display_name="Czech"), _model(display_name="estonian")]
        assert [m.display_name for m in sorted(models)] == ["Czech", "estonian", "spanish"]

    def test_ties_broken_by_language_pair(self) -> None:
        """Equal names are ordered by source and target language."""
        a = _model(source_language="en", target_language="de")
        b = _model(source_language="de", target_language="en")
        assert sorted([a, b]) == [b, a]

    def test_copy_is_independent(self) -> None:
        """Mutating a copy leaves the original alone."""
        original = _model(path="/m", local_version=1.0)
        copy = original.copy()
        copy.remote_version = 5.0
        assert original.remote_version is None
        assert copy == _model(path="/m", local_version=1.0, remote_version=5.0)

    def test_to_dict_includes_outdated(self) -> None:
        """The dictionary form carries the derived outdated flag."""
        data = _model(path="/m", local_version=1.0, remote_version=2.0).to_dict()
        assert data["outdated"] is True
        assert data["short_name"] == "deen.student.tiny11"
        assert data["path"] == "/m"
