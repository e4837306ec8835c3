import pytest

from core.drafts import DraftEdit, EditReconciler, Notification, SavePolicy


class Harness:
    """Collaborators for an EditReconciler, recording what was called."""

    def __init__(self, write_error=None, reload_error=None):
        self.written = []
        self.reloads = 0
        self.resets = 0
        self.notifications = []
        self.loading_seen = []
        self.write_error = write_error
        self.reload_error = reload_error
        self.reconciler = None

    async def writer(self, drafts):
        self.loading_seen.append(self.reconciler.loading)
        self.written.append(drafts)
        if self.write_error:
            raise self.write_error

    async def reload(self):
        self.loading_seen.append(self.reconciler.loading)
        self.reloads += 1
        if self.reload_error:
            raise self.reload_error

    async def reset(self):
        self.resets += 1

    def notify(self, notification):
        self.notifications.append(notification)

    def build(self, policy=SavePolicy.REFETCH):
        self.reconciler = EditReconciler(self.writer, self.reload, self.reset, self.notify, policy)
        return self.reconciler


def test_record_draft_last_write_wins():
    reconciler = Harness().build()
    reconciler.record_draft("006A", "StageName", "Quoted")
    reconciler.record_draft("006B", "Amount", 10)
    reconciler.record_draft("006A", "StageName", "Bound")
    assert reconciler.drafts == [
        DraftEdit("006B", "Amount", 10),
        DraftEdit("006A", "StageName", "Bound"),
    ]


@pytest.mark.asyncio
async def test_save_success_clears_drafts_and_reloads():
    harness = Harness()
    reconciler = harness.build()
    reconciler.record_draft("006A", "StageName", "Bound")
    reconciler.record_draft("006B", "Amount", 10)

    assert await reconciler.save() is True

    assert reconciler.drafts == []
    assert len(harness.written) == 1
    assert len(harness.written[0]) == 2
    assert harness.reloads == 1
    assert harness.resets == 0
    assert harness.notifications == [Notification("Success", "Opportunities updated", "success")]
    assert harness.loading_seen == [True, True]
    assert reconciler.loading is False


@pytest.mark.asyncio
async def test_save_failure_keeps_drafts(failing_save):
    harness = Harness(write_error=failing_save)
    reconciler = harness.build()
    reconciler.record_draft("006A", "StageName", "Bound")
    reconciler.record_draft("006B", "Amount", 10)

    assert await reconciler.save() is False

    assert len(reconciler.drafts) == 2
    assert harness.reloads == 0
    assert harness.notifications == [Notification("Error updating opportunities", "A, B", "error")]
    assert reconciler.loading is False


@pytest.mark.asyncio
async def test_loading_flag_resets_when_reload_fails():
    harness = Harness(reload_error=RuntimeError("refresh failed"))
    reconciler = harness.build()
    reconciler.record_draft("006A", "StageName", "Bound")

    assert await reconciler.save() is False

    assert reconciler.loading is False
    assert reconciler.drafts == []
    assert [n.severity for n in harness.notifications] == ["success", "error"]
    assert harness.notifications[-1].message == "refresh failed"


@pytest.mark.asyncio
async def test_force_reload_policy_resets_instead_of_reloading():
    harness = Harness()
    reconciler = harness.build(SavePolicy.FORCE_RELOAD)
    reconciler.record_draft("006A", "Amount", 5)

    assert await reconciler.save() is True

    assert harness.resets == 1
    assert harness.reloads == 0


@pytest.mark.asyncio
async def test_save_without_drafts_does_not_write():
    harness = Harness()
    reconciler = harness.build()

    assert await reconciler.save() is True

    assert harness.written == []
    assert harness.notifications == []
    assert reconciler.loading is False


@pytest.mark.parametrize("value, expected", [
    (None, SavePolicy.REFETCH),
    ("refetch", SavePolicy.REFETCH),
    ("FORCE_RELOAD", SavePolicy.FORCE_RELOAD),
    (SavePolicy.FORCE_RELOAD, SavePolicy.FORCE_RELOAD),
])
def test_save_policy_coerce(value, expected):
    assert SavePolicy.coerce(value) is expected


def test_save_policy_rejects_unknown_values():
    with pytest.raises(ValueError):
        SavePolicy.coerce("sometimes")
