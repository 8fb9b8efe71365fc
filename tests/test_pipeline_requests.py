import pytest

from core.domain.errors import InvalidArgumentError
from core.domain.models import Job, Parameter, Pipeline, Stage
from core.domain.requests import CodeFormat, ResponseKind
from core.services import pipeline_requests as pr


def test_get_pipeline_always_requests_usage():
    req = pr.get_pipeline("PRJ", "P")

    assert (req.method, req.path) == ("GET", "/project/PRJ/pipeline/P")
    assert req.params == {
        "withApplications": "true",
        "withWorkflows": "true",
        "withEnvironments": "true",
    }
    assert req.expect is ResponseKind.MODEL and req.model is Pipeline


def test_usage_flags_are_not_shared_between_descriptors():
    first = pr.get_pipeline("PRJ", "P")
    first.params["withApplications"] = "false"
    assert pr.get_pipeline("PRJ", "P").params["withApplications"] == "true"


def test_list_and_create_target_the_collection():
    listed = pr.list_pipelines("PRJ")
    created = pr.create_pipeline("PRJ", Pipeline(name="P"))

    assert (listed.method, listed.path, listed.expect) == ("GET", "/project/PRJ/pipeline", ResponseKind.MODEL_LIST)
    assert (created.method, created.path) == ("POST", "/project/PRJ/pipeline")
    assert created.json["name"] == "P"


def test_update_pipeline_addresses_the_old_name():
    req = pr.update_pipeline("PRJ", "old", Pipeline(name="new"))

    assert (req.method, req.path) == ("PUT", "/project/PRJ/pipeline/old")
    assert req.json["name"] == "new"


def test_delete_pipeline_expects_success_only():
    req = pr.delete_pipeline("PRJ", "P")
    assert (req.method, req.expect, req.has_body) == ("DELETE", ResponseKind.SUCCESS, False)


def test_import_without_name_creates():
    for name in (None, ""):
        req = pr.import_pipeline("PRJ", name, "name: P\n")
        assert (req.method, req.path) == ("POST", "/project/PRJ/import/pipeline")


def test_import_with_name_replaces():
    req = pr.import_pipeline("PRJ", "P", "name: P\n")

    assert (req.method, req.path) == ("PUT", "/project/PRJ/import/pipeline/P")
    assert req.headers == {"Content-Type": "application/x-yaml"}
    assert req.params == {"format": "yaml"}
    assert req.content == "name: P\n"
    assert req.json is None
    assert req.expect is ResponseKind.STRING_LIST


def test_import_force_and_format():
    req = pr.create_from_import("PRJ", "{}", force=True, code_format=CodeFormat.JSON)

    assert req.params == {"format": "json", "forceUpdate": "true"}
    assert req.headers == {"Content-Type": "application/json"}


def test_replace_from_import_requires_a_name():
    with pytest.raises(InvalidArgumentError):
        pr.replace_from_import("PRJ", "", "name: P\n")


def test_import_rejects_non_text_code():
    with pytest.raises(InvalidArgumentError):
        pr.create_from_import("PRJ", {"name": "P"})


def test_preview_sends_raw_yaml():
    req = pr.preview_import("PRJ", "name: P\n")

    assert (req.method, req.path) == ("POST", "/project/PRJ/preview/pipeline")
    assert req.params == {"format": "yaml"}
    assert req.headers == {"Content-Type": "application/x-yaml"}
    assert req.content == "name: P\n"
    assert req.model is Pipeline


def test_export_requests_text_with_permissions():
    req = pr.export_pipeline("PRJ", "P")

    assert (req.method, req.path) == ("GET", "/project/PRJ/export/pipeline/P")
    assert req.params == {"format": "yaml", "withPermissions": "true"}
    assert req.headers == {"Accept": "*/*"}
    assert req.expect is ResponseKind.TEXT


def test_rollback_puts_audit_id_in_the_address():
    req = pr.rollback_pipeline("PRJ", "P", 42)

    assert (req.method, req.path) == ("POST", "/project/PRJ/pipeline/P/rollback/42")
    assert req.json == {}
    assert req.content is None


def test_applications():
    req = pr.list_applications("PRJ", "P")
    assert (req.method, req.path, req.expect) == ("GET", "/project/PRJ/pipeline/P/application", ResponseKind.MODEL_LIST)


def test_stage_operations():
    stage = Stage(id=7, name="build", build_order=1)

    inserted = pr.insert_stage("PRJ", "P", Stage(name="build"))
    updated = pr.update_stage("PRJ", "P", stage)
    deleted = pr.delete_stage("PRJ", "P", stage)
    moved = pr.move_stage("PRJ", "P", stage)

    assert (inserted.method, inserted.path) == ("POST", "/project/PRJ/pipeline/P/stage")
    assert (updated.method, updated.path) == ("PUT", "/project/PRJ/pipeline/P/stage/7")
    assert (deleted.method, deleted.path, deleted.has_body) == ("DELETE", "/project/PRJ/pipeline/P/stage/7", False)
    assert (moved.method, moved.path) == ("POST", "/project/PRJ/pipeline/P/stage/move")
    assert moved.json["build_order"] == 1
    assert all(r.model is Pipeline for r in (inserted, updated, deleted, moved))


def test_stage_without_id_cannot_be_addressed():
    with pytest.raises(InvalidArgumentError):
        pr.update_stage("PRJ", "P", Stage(name="build"))
    with pytest.raises(InvalidArgumentError):
        pr.move_stage("PRJ", "P", Stage(name="build"))


def test_job_operations():
    job = Job(pipeline_action_id=3, action={"name": "compile"})

    added = pr.add_job("PRJ", "P", 7, Job(action={"name": "compile"}))
    updated = pr.update_job("PRJ", "P", 7, job)
    deleted = pr.delete_job("PRJ", "P", 7, job)

    assert (added.method, added.path) == ("POST", "/project/PRJ/pipeline/P/stage/7/job")
    assert (updated.method, updated.path) == ("PUT", "/project/PRJ/pipeline/P/stage/7/job/3")
    assert (deleted.method, deleted.path) == ("DELETE", "/project/PRJ/pipeline/P/stage/7/job/3")


def test_job_requires_stage_and_action_ids():
    with pytest.raises(InvalidArgumentError):
        pr.add_job("PRJ", "P", None, Job())
    with pytest.raises(InvalidArgumentError):
        pr.update_job("PRJ", "P", 7, Job())


def test_add_parameter():
    req = pr.add_parameter("PRJ", "P", Parameter(name="FOO"))

    assert (req.method, req.path) == ("POST", "/project/PRJ/pipeline/P/parameter/FOO")
    assert req.json["name"] == "FOO"


def test_update_parameter_rename_addresses_previous_name():
    req = pr.update_parameter("PRJ", "P", Parameter(name="new", previous_name="old"))

    assert (req.method, req.path) == ("PUT", "/project/PRJ/pipeline/P/parameter/old")
    assert req.json["name"] == "new"
    assert "previousName" not in req.json


def test_update_parameter_without_rename_uses_current_name():
    req = pr.update_parameter("PRJ", "P", Parameter(name="x", value=1))

    assert req.path == "/project/PRJ/pipeline/P/parameter/x"
    assert req.json["value"] == "1"


def test_parameter_change_variants():
    edit = pr.parameter_change(Parameter(name="x"))
    rename = pr.parameter_change(Parameter(name="new", previous_name="old"))

    assert isinstance(edit, pr.ParameterEdit) and edit.target == "x"
    assert isinstance(rename, pr.ParameterRename) and rename.target == "old"
    assert pr.update_parameter("PRJ", "P", rename).path.endswith("/parameter/old")


def test_rename_to_empty_previous_name_is_rejected():
    with pytest.raises(InvalidArgumentError):
        pr.update_parameter("PRJ", "P", pr.ParameterRename(previous_name=" ", parameter=Parameter(name="x")))


def test_delete_parameter():
    req = pr.delete_parameter("PRJ", "P", Parameter(name="FOO"))
    assert (req.method, req.path, req.has_body) == ("DELETE", "/project/PRJ/pipeline/P/parameter/FOO", False)
