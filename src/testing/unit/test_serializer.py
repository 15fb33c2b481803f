import json

from restinfront import FieldTypes, Model


class SerializerTestAuthor(Model):
    pass


class SerializerTestBook(Model):
    pass


SerializerTestAuthor.define_schema(
    {
        "id": {"type": FieldTypes.UUID, "primary_key": True},
        "name": {"type": FieldTypes.STRING},
        "born": {"type": FieldTypes.DATEONLY, "allow_blank": True},
        "updated_at": {"type": FieldTypes.DATE, "allow_blank": True},
        "phone": {"type": FieldTypes.PHONE, "allow_blank": True},
        "books": {"type": FieldTypes.HASMANY("serializer_test_book")},
    }
)

SerializerTestBook.define_schema(
    {
        "id": {"type": FieldTypes.INTEGER, "primary_key": True},
        "title": {"type": FieldTypes.STRING},
    }
)


def test_serialize_applies_field_type_conversions():
    author = SerializerTestAuthor(
        {
            "id": "a1",
            "name": "Ann",
            "born": "1990-05-04",
            "updated_at": "2024-03-01T08:30:00.000Z",
            "phone": "+33 6 12",
            "books": [{"id": 1, "title": "Dune"}],
        },
        is_new=False,
    )

    assert author.serialize() == {
        "id": "a1",
        "name": "Ann",
        "born": "1990-05-04",
        "updated_at": "2024-03-01T08:30:00.000Z",
        "phone": "+33612",
        "books": [{"id": 1, "title": "Dune"}],
    }


def test_serialized_fields_follow_the_validator_table():
    author = SerializerTestAuthor({"name": "Ann", "nickname": "A."})

    assert author.nickname == "A."
    assert "nickname" not in author.serialize()
    assert set(author.serialize()) == set(SerializerTestAuthor.schema())


def test_fields_absent_from_server_data_are_omitted():
    author = SerializerTestAuthor({"name": "Ann"}, is_new=False)
    assert author.serialize() == {"name": "Ann"}


def test_remove_invalid_keeps_checked_and_valid_fields_only():
    author = SerializerTestAuthor({"name": "Ann"})

    # only auto-checked fields at first: the primary key and the timestamp
    assert author.serialize(remove_invalid=True) == {"id": author.id, "updated_at": None}

    author.valid(["name"])
    assert author.serialize(remove_invalid=True)["name"] == "Ann"

    author.name = ""
    assert "name" not in author.serialize(remove_invalid=True)


def test_remove_invalid_propagates_to_associations():
    author = SerializerTestAuthor({"name": "Ann", "books": [{"title": "Dune"}]})
    author.valid(["name", "books", ("books", ["title"])])

    serialized = author.serialize(remove_invalid=True)

    # the INTEGER primary key of a new book is blank, hence invalid
    assert serialized["books"] == [{"title": "Dune"}]


def test_collection_serialize_and_json():
    books = SerializerTestBook([{"id": 1, "title": "Dune"}, {"id": 2, "title": "Emma"}])

    assert books.serialize() == [{"id": 1, "title": "Dune"}, {"id": 2, "title": "Emma"}]
    assert json.loads(books.to_json()) == books.serialize()
