import pytest

from restinfront import Collection, FieldTypes, Model, SchemaError


class CollectionTestTag(Model):
    pass


CollectionTestTag.define_schema(
    {
        "id": {"type": FieldTypes.STRING, "primary_key": True},
        "label": {"type": FieldTypes.STRING},
        "weight": {"type": FieldTypes.INTEGER, "allow_blank": True},
    }
)


class CollectionTestKeyless(Model):
    pass


CollectionTestKeyless.define_schema({"label": {"type": FieldTypes.STRING}})


def _tags(*ids: str, **kwargs) -> Collection:
    return CollectionTestTag([{"id": tag_id, "label": tag_id.upper()} for tag_id in ids], **kwargs)


def test_adding_items_without_count():
    tags = CollectionTestTag([])
    for tag_id in ("a", "b", "c"):
        tags.add({"id": tag_id})

    assert len(tags) == 3
    assert tags.total_count == 3
    assert not tags.has_more
    assert not tags.is_empty


def test_explicit_count_overrides_running_count():
    tags = _tags("a", "b", count=10)

    assert len(tags) == 2
    assert tags.total_count == 10
    assert tags.has_more


def test_explicit_count_never_falls_below_length():
    tags = _tags("a", "b", "c", count=1)
    assert tags.total_count == 3


def test_direct_construction():
    tags = Collection(CollectionTestTag, [{"id": "a"}], is_new=False, count=4)

    assert tags.model is CollectionTestTag
    assert not tags[0].is_new
    assert tags.total_count == 4


def test_add_returns_instance_and_keeps_existing_ones():
    tags = CollectionTestTag([])
    tag = CollectionTestTag({"id": "a"})

    assert tags.add(tag) is tag
    built = tags.add({"id": "b"})
    assert isinstance(built, CollectionTestTag)
    assert built.id == "b"
    assert tags.add().id == ""


def test_add_rejects_non_mapping():
    tags = CollectionTestTag([])
    with pytest.raises(TypeError):
        tags.add([{"id": "a"}])  # type: ignore[arg-type]


def test_remove_missing_reference_is_soft():
    tags = _tags("a", "b")

    assert tags.remove("zzz") is None
    assert len(tags) == 2
    assert tags.total_count == 2


@pytest.mark.parametrize(
    "ref",
    [
        "b",
        {"id": "b"},
        lambda item: item.label == "B",
    ],
)
def test_remove_present_reference(ref):
    tags = _tags("a", "b", "c")

    removed = tags.remove(ref)

    assert removed is not None
    assert removed.id == "b"
    assert len(tags) == 2
    assert tags.total_count == 2
    assert [tag.id for tag in tags] == ["a", "c"]


def test_remove_by_instance():
    tags = _tags("a", "b")
    other = CollectionTestTag({"id": "a"})

    assert tags.remove(other).id == "a"
    assert len(tags) == 1


def test_find_and_exists():
    tags = _tags("a", "b")

    assert tags.find("b") is tags[1]
    assert tags.find({"id": "a"}) is tags[0]
    assert tags.find("zzz") is None
    assert tags.exists("a")
    assert not tags.exists(lambda item: item.label == "Z")


def test_toggle_is_its_own_inverse():
    tags = _tags("a", "b")
    before = [tag.id for tag in tags]

    added = tags.toggle({"id": "c"})
    assert added.id == "c"
    assert tags.exists("c")

    removed = tags.toggle({"id": "c"})
    assert removed.id == "c"
    assert [tag.id for tag in tags] == before
    assert tags.total_count == 2


def test_toggle_with_explicit_reference():
    tags = _tags("a")
    tags.toggle({"id": "x", "label": "A"}, ref=lambda item: item.label == "A")
    assert tags.is_empty


def test_is_last():
    tags = _tags("a", "b")

    assert tags.is_last("b")
    assert tags.is_last({"id": "b"})
    assert not tags.is_last("a")
    assert not CollectionTestTag([]).is_last("a")


def test_clear_keeps_total_count():
    tags = _tags("a", "b", count=5)
    tags.clear()

    assert tags.is_empty
    assert tags.total_count == 5


def test_sequence_helpers():
    tags = CollectionTestTag(
        [{"id": "a", "weight": 3}, {"id": "b", "weight": 1}, {"id": "c", "weight": 2}]
    )

    assert tags.last.id == "c"
    assert CollectionTestTag([]).last is None
    assert [tag.id for tag in tags[0:2]] == ["a", "b"]

    tags.sort(key=lambda item: item.weight)
    assert [tag.id for tag in tags] == ["b", "c", "a"]

    assert [tag.id for tag in tags.filter(lambda item: item.weight > 1)] == ["c", "a"]
    assert tags.map(lambda item: item.weight) == [1, 2, 3]

    # items() is a copy
    items = tags.items()
    items.clear()
    assert len(tags) == 3


def test_serialize_and_clone():
    tags = _tags("a", "b", count=7)

    assert tags.serialize() == [
        {"id": "a", "label": "A", "weight": None},
        {"id": "b", "label": "B", "weight": None},
    ]

    copied = tags.clone()
    assert copied is not tags
    assert copied[0] is not tags[0]
    assert copied.serialize() == tags.serialize()
    assert copied.total_count == 7


def test_lookup_by_key_requires_a_primary_key():
    notes = CollectionTestKeyless([{"label": "a"}])

    with pytest.raises(SchemaError):
        notes.find("a")
    assert notes.find(lambda item: item.label == "a") is notes[0]
