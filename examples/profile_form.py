"""
Example: autosave a profile form with formwatchers.

Loads saved data as an external update (not echoed back to the autosave),
then simulates a user typing and adding a field at runtime.

Run:
    python examples/profile_form.py
"""
import asyncio
import logging

from formwatchers import ReactiveDict, create_form_watchers

logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

SAVED_PROFILE = {"name": "Ada", "email": "ada@example.com", "age": 36}


async def main():
    form = ReactiveDict(name="", email="", age=0, password="")

    def autosave(key, value, origin):
        print(f"autosave {key}={value!r} ({origin})")

    watchers = create_form_watchers(
        form,
        autosave,
        debounce_delay=0.3,
        excluded_keys=["password"],
        diagnostics=True,
    )

    # Loading saved data must not trigger an autosave
    with watchers.external_update():
        form.update(SAVED_PROFILE)
    await asyncio.sleep(0.5)

    # User types: only the final value is saved
    for partial in ("A", "Ad", "Ada L", "Ada Lovelace"):
        form["name"] = partial
        await asyncio.sleep(0.05)
    await asyncio.sleep(0.5)

    # Never saved
    form["password"] = "hunter2"

    # Fields added at runtime are picked up
    form["phone"] = ""
    form["phone"] = "555-0100"
    await asyncio.sleep(0.5)

    watchers.destroy()


if __name__ == "__main__":
    asyncio.run(main())
