import pytest

from restinfront import ErrorCode, FieldError, FieldTypes, Model, configure
from testing.helpers import HookRecorder


class ValidatorTestAuthor(Model):
    pass


class ValidatorTestBook(Model):
    pass


class ValidatorTestProfile(Model):
    pass


class ValidatorTestHost(Model):
    pass


ValidatorTestAuthor.define_schema(
    {
        "id": {"type": FieldTypes.UUID, "primary_key": True},
        "name": {"type": FieldTypes.STRING},
        "email": {"type": FieldTypes.EMAIL, "allow_blank": True},
        "age": {
            "type": FieldTypes.INTEGER,
            "allow_blank": True,
            "is_valid": lambda value: value is None or value < 150,
        },
        "nickname": {
            "type": FieldTypes.STRING,
            # a nickname is required for authors without a name
            "allow_blank": lambda value, entity: entity.name != "",
        },
        "books": {"type": FieldTypes.HASMANY("validator_test_book")},
        "profile": {"type": FieldTypes.HASONE("validator_test_profile")},
    }
)

ValidatorTestBook.define_schema(
    {
        "id": {"type": FieldTypes.UUID, "primary_key": True},
        "title": {"type": FieldTypes.STRING},
    }
)

ValidatorTestProfile.define_schema(
    {
        "id": {"type": FieldTypes.UUID, "primary_key": True},
        "bio": {"type": FieldTypes.STRING},
    }
)

ValidatorTestHost.define_schema(
    {
        "id": {"type": FieldTypes.UUID, "primary_key": True},
        "ip": {"type": FieldTypes.IP},
    }
)


def _checked(entity) -> dict:
    return {fieldname: validator.checked for fieldname, validator in entity._validator.items()}


def test_empty_selector_list_always_succeeds():
    hook = HookRecorder()
    configure(on_validation_error=hook)
    author = ValidatorTestAuthor()

    assert author.validation_errors([]) is None
    assert author.valid([])
    assert hook.count == 0


def test_direct_field_not_valid():
    author = ValidatorTestAuthor({"name": ""})

    errors = author.validation_errors(["name"])

    assert errors == {"name": FieldError(ErrorCode.NOT_VALID, "")}
    assert author.error("name")


def test_missing_field_is_not_found_and_marks_nothing_checked():
    author = ValidatorTestAuthor({"name": "Ann"})
    before = _checked(author)

    errors = author.validation_errors(["unknown"])

    assert errors == {"unknown": FieldError(ErrorCode.NOT_FOUND)}
    assert _checked(author) == before


def test_field_absent_from_server_data_is_not_found():
    author = ValidatorTestAuthor({"id": "a1"}, is_new=False)
    assert author.validation_errors(["name"]) == {"name": FieldError(ErrorCode.NOT_FOUND)}


def test_primary_key_is_checked_from_the_start():
    author = ValidatorTestAuthor()
    assert author._validator["id"].checked
    assert not author._validator["name"].checked


def test_error_reports_checked_fields_only():
    author = ValidatorTestAuthor({"name": ""})
    assert not author.error("name")

    author.valid(["name"])
    assert author.error("name")

    author.name = "Ann"
    assert not author.error("name")
    assert not author.error("not_a_field")


def test_blank_policy_and_custom_validity():
    author = ValidatorTestAuthor({"name": "Ann", "email": "", "age": 20})
    assert author.validation_errors(["email", "age", "nickname"]) is None

    author.email = "not-an-email"
    author.age = 200
    errors = author.validation_errors(["email", "age"])
    assert errors == {
        "email": FieldError(ErrorCode.NOT_VALID, "not-an-email"),
        "age": FieldError(ErrorCode.NOT_VALID, 200),
    }


def test_blank_policy_depends_on_entity():
    author = ValidatorTestAuthor({"name": ""})
    assert author.validation_errors(["nickname"]) == {
        "nickname": FieldError(ErrorCode.NOT_VALID, "")
    }


def test_valid_calls_hook_with_error_tree():
    hook = HookRecorder()
    configure(on_validation_error=hook)
    author = ValidatorTestAuthor({"name": ""})

    assert not author.valid(["name"])
    assert hook.count == 1
    args, _ = hook.calls[0]
    assert args[0] == {"name": FieldError(ErrorCode.NOT_VALID, "")}


def test_valid_resets_save_track():
    author = ValidatorTestAuthor({"name": "Ann"})
    author.state.save.failed = True
    author.state.save.succeeded = True

    author.valid(["name"])

    assert not author.save_failed
    assert not author.save_succeeded


def test_has_many_aggregates_only_items_with_errors():
    author = ValidatorTestAuthor(
        {
            "name": "Ann",
            "books": [{"title": "Dune"}, {"title": ""}, {"title": "Emma"}],
        }
    )

    errors = author.validation_errors(["name", ("books", ["title"])])

    assert errors == {"books": {1: {"title": FieldError(ErrorCode.NOT_VALID, "")}}}
    assert author._validator["books"].checked


def test_empty_has_many_validates_to_no_errors():
    author = ValidatorTestAuthor({"name": "Ann"})
    assert author.validation_errors([("books", ["title"])]) is None


def test_has_one_recursion():
    author = ValidatorTestAuthor({"name": "Ann"})

    # the default profile has a blank bio
    assert author.validation_errors([("profile", ["bio"])]) == {
        "profile": {"bio": FieldError(ErrorCode.NOT_VALID, "")}
    }

    author.profile.bio = "Writer"
    assert author.validation_errors([("profile", ["bio"])]) is None


def test_null_has_one_is_skipped_with_nested_selectors():
    author = ValidatorTestAuthor({"name": "Ann", "profile": None})
    assert author.validation_errors([("profile", ["bio"])]) is None


def test_association_without_nested_selectors_uses_its_own_rule():
    author = ValidatorTestAuthor({"name": "Ann", "books": [{"title": "Dune"}]})
    assert author.validation_errors([("profile", None), ("books", None)]) is None

    author.profile = None
    assert author.validation_errors([("profile", None)]) == {
        "profile": FieldError(ErrorCode.NOT_VALID, None)
    }


def test_nested_selectors_on_missing_association_are_not_found():
    author = ValidatorTestAuthor({"id": "a1"}, is_new=False)
    assert author.validation_errors([("books", ["title"])]) == {
        "books": FieldError(ErrorCode.NOT_FOUND)
    }


@pytest.mark.parametrize(
    "selectors",
    [
        "name",
        [42],
        [("books",)],
        [("name", ["title"])],
    ],
)
def test_malformed_selectors_raise(selectors):
    author = ValidatorTestAuthor({"name": "Ann"})
    with pytest.raises(TypeError):
        author.validation_errors(selectors)


def test_non_ascii_digits_in_ip_are_not_valid():
    host = ValidatorTestHost({"ip": "10.0.0.²"})

    assert not host.valid(["ip"])
    assert host.validation_errors(["ip"]) == {"ip": FieldError(ErrorCode.NOT_VALID, "10.0.0.²")}
