"""Tests for the diagnostic event stream."""
import logging

from formwatchers import WatcherDiagnostics, create_form_watchers


def test_no_events_when_disabled(form, updates, scheduler, diagnostics_records):
    watchers = create_form_watchers(form, updates, scheduler=scheduler, debounce_delay=0.1)

    form["name"] = "test"
    scheduler.run_all()
    watchers.destroy()

    assert diagnostics_records() == []


def test_value_changed_and_debounced_update(form, updates, scheduler, diagnostics_records):
    create_form_watchers(form, updates, scheduler=scheduler, debounce_delay=0.1, diagnostics=True)

    form["name"] = "test"
    scheduler.run_all()

    changed = diagnostics_records("value_changed")
    assert len(changed) == 1
    assert changed[0].form_key == "name"
    assert changed[0].form_old == ""
    assert changed[0].form_new == "test"
    assert changed[0].form_origin == "user"
    assert changed[0].getMessage() == "Value changed for name: '' -> 'test' (origin=user)"

    debounced = diagnostics_records("debounced_update")
    assert [(r.form_key, r.form_value, r.form_origin) for r in debounced] == [("name", "test", "user")]


def test_skipped_update_event(form, updates, scheduler, diagnostics_records):
    watchers = create_form_watchers(
        form, updates, scheduler=scheduler, diagnostics=True, skip_external_updates=True
    )

    watchers.mark_update_as_external(lambda: form.__setitem__("email", "test@test.com"))
    scheduler.run_all()

    skipped = diagnostics_records("update_skipped")
    assert [r.form_key for r in skipped] == ["email"]
    assert skipped[0].getMessage() == "Skipping update for email: external update"
    assert skipped[0].form_reason == "external update"
    assert diagnostics_records("value_changed")[0].form_origin == "external"


def test_keys_added_event(form, updates, scheduler, diagnostics_records):
    create_form_watchers(
        form, updates, scheduler=scheduler, diagnostics=True, excluded_keys=["token"]
    )

    form["newField"] = "test"
    form.update(a=1, token="x")

    added = diagnostics_records("keys_added")
    assert [r.form_keys for r in added] == [["newField"], ["a", "token"]]
    assert added[0].getMessage() == "New properties detected: ['newField']"
    skipped = diagnostics_records("update_skipped")
    assert [(r.form_key, r.form_reason) for r in skipped] == [("token", "field is excluded")]


def test_keys_added_event_for_fully_excluded_batch(form, updates, scheduler, diagnostics_records):
    create_form_watchers(
        form, updates, scheduler=scheduler, diagnostics=True, excluded_keys=["token"]
    )

    form["token"] = "x"

    assert [r.form_keys for r in diagnostics_records("keys_added")] == [["token"]]


def test_excluded_field_event_at_construction(form, updates, scheduler, diagnostics_records):
    create_form_watchers(form, updates, scheduler=scheduler, diagnostics=True, excluded_keys=["email"])
    skipped = diagnostics_records("update_skipped")
    assert [(r.form_key, r.form_reason) for r in skipped] == [("email", "field is excluded")]
    assert skipped[0].getMessage() == "Skipping update for email: field is excluded"


def test_destroyed_event(form, updates, scheduler, diagnostics_records):
    watchers = create_form_watchers(form, updates, scheduler=scheduler, diagnostics=True)
    watchers.destroy()

    destroyed = diagnostics_records("destroyed")
    assert len(destroyed) == 1
    assert destroyed[0].getMessage() == "Destroying form watchers"


def test_custom_diagnostics_logger(form, updates, scheduler, caplog):
    custom = logging.getLogger("myapp.form")
    caplog.set_level(logging.DEBUG, logger="myapp.form")

    create_form_watchers(
        form, updates, scheduler=scheduler, diagnostics=True, diagnostics_logger=custom
    )
    form["name"] = "x"

    assert any(r.name == "myapp.form" and r.form_event == "value_changed" for r in caplog.records)


def test_diagnostics_disabled_is_silent(caplog):
    caplog.set_level(logging.DEBUG)
    diagnostics = WatcherDiagnostics(enabled=False)
    diagnostics.value_changed("name", "", "x", "user")
    diagnostics.keys_added(["a"])
    diagnostics.destroyed()
    assert caplog.records == []
