"""End-to-end user workflows and scenarios"""

from decimal import Decimal

import pytest

from money_tracker.core.exceptions import SessionExpiredError
from money_tracker.services.export_service import ExportService
from money_tracker.services.ledger_service import LedgerService
from money_tracker.services.render_service import RenderService
from money_tracker.services.tracker import TrackerContext


class TestCompleteMoneyWorkflow:
    """Test a complete tracking session from login to logout"""

    @pytest.mark.asyncio
    async def test_track_reverse_and_delete(self, tracker: TrackerContext, backend):
        """
        Complete workflow: log in, add people, move money, reverse, delete

        Scenario:
        - Alice logs in
        - Alice adds Bob and Carol
        - Alice receives 1000 from Bob and sends 250 to Bob and 100 to Carol
        - Totals and balances match the backend
        - Alice reverses the 250 sent to Bob
        - Alice deletes Carol, whose transactions disappear
        """
        forms, dashboard = tracker.forms, tracker.dashboard

        # Step 1: Log in
        await forms.login("alice", "secret123")
        assert tracker.session.is_logged_in

        # Step 2: Add people
        await forms.add_person("Bob")
        await forms.add_person("Carol")
        assert [p.name for p in dashboard.people] == ["Bob", "Carol"]
        assert dashboard.view().groups == []

        # Step 3: Move money
        await forms.receive("Bob", "1000", "Loan repayment")
        await forms.send("Bob", "250", "Dinner")
        await forms.send("Carol", "100")

        assert dashboard.totals.received == Decimal("1000")
        assert dashboard.totals.sent == Decimal("350")
        assert dashboard.totals.net == Decimal("650")
        assert dashboard.find_person("Bob").balance == Decimal("750")
        assert dashboard.find_person("Carol").balance == Decimal("-100")

        # The last person acted on is the one expanded
        view = dashboard.view()
        assert [(g.person_name, g.expanded) for g in view.groups] == [("Bob", False), ("Carol", True)]

        # Every balance is the signed sum of that person's active transactions
        for group in view.groups:
            person = dashboard.find_person(group.person_name)
            assert person.balance == LedgerService.calculate_balance(group.transactions)

        # Step 4: Reverse the dinner
        dinner = next(t for t in dashboard.transactions if t.description == "Dinner")
        await forms.reverse(dinner.id)

        assert dashboard.totals.sent == Decimal("100")
        assert dashboard.find_person("Bob").balance == Decimal("1000")
        bob = next(g for g in dashboard.groups if g.person_name == "Bob")
        assert [t.reversed for t in bob.transactions] == [False, True]

        # A fresh load agrees with the optimistic patch
        await dashboard.reload()
        assert dashboard.totals.sent == Decimal("100")
        assert dashboard.find_person("Bob").balance == Decimal("1000")
        assert dashboard.find_transaction(dinner.id).reversed is True

        # Step 5: Delete Carol
        await forms.delete_person("Carol")
        assert [p.name for p in dashboard.people] == ["Bob"]
        assert all(t.owner_name == "Bob" for t in dashboard.transactions)
        assert dashboard.totals.sent == Decimal("0")
        assert dashboard.expanded_id is None

        # Step 6: Log out
        forms.logout()
        assert not tracker.session.is_logged_in
        assert dashboard.people == []

    @pytest.mark.asyncio
    async def test_dashboard_rendering(self, logged_in_tracker: TrackerContext, backend):
        """
        Rendering reflects the cached state

        Scenario:
        - Bob has one active and one reversed transaction
        - The user expands Bob's group
        - HTML, text and CSV outputs all show the same data
        """
        backend.add_transaction("Bob", "SEND", Decimal("40"), "Taxi")
        reversed_tx = backend.add_transaction("Bob", "RECEIVE", Decimal("15"), "Refund")
        await logged_in_tracker.dashboard.reload()
        await logged_in_tracker.forms.reverse(reversed_tx["id"])

        dashboard = logged_in_tracker.dashboard
        assert dashboard.toggle("Bob") is True
        view = dashboard.view()

        html = RenderService.render_transactions(view)
        assert 'id="tx-Bob" style="display:block;"' in html
        assert html.count('class="reverse-btn"') == 1
        assert "(Reversed)" in html

        text = RenderService.render_text(view)
        assert "[-] Bob (2)" in text
        assert "Net: -₹40" in text

        csv_text = ExportService.transactions_to_csv(dashboard.transactions)
        assert csv_text.count("\n") == 3


class TestSessionScenarios:
    """Test session lifetime across requests"""

    @pytest.mark.asyncio
    async def test_expired_token_redirects_to_login(self, tracker: TrackerContext, backend, token_factory):
        """
        A stale token never reaches the server

        Scenario:
        - The stored token expired a minute ago
        - Loading the dashboard fails before any request
        - The session is cleared and a single notification asks for a new login
        """
        tracker.session.start(token_factory(expires_in=-60), "alice")

        with pytest.raises(SessionExpiredError) as exc_info:
            await tracker.dashboard.reload()

        assert exc_info.value.redirect_to == "/login"
        assert backend.requests == []
        assert tracker.session.token is None
        assert [n.message for n in tracker.notifier.history] == ["Session expired. Please login again."]

    @pytest.mark.asyncio
    async def test_server_revokes_session(self, logged_in_tracker: TrackerContext, backend):
        """
        The server rejects a token that still looks valid

        Scenario:
        - Alice is logged in
        - The backend starts answering 401
        - Alice logs back in and carries on
        """
        backend.failures = [401]

        with pytest.raises(SessionExpiredError):
            await logged_in_tracker.forms.add_person("Bob")
        assert not logged_in_tracker.session.is_logged_in

        await logged_in_tracker.forms.login("alice", "secret123")
        await logged_in_tracker.forms.add_person("Bob")
        assert [p.name for p in logged_in_tracker.dashboard.people] == ["Bob"]

    @pytest.mark.asyncio
    async def test_session_shared_through_file(self, settings, backend):
        """
        Two client contexts share a session file

        Scenario:
        - The first context logs in with a session file
        - A second context on the same file can load the dashboard
        - Logging out in the second context logs out the first on its next start
        """
        async with TrackerContext(settings, session_path=settings.session_file, transport=backend.transport) as first:
            await first.forms.login("alice", "secret123")

        async with TrackerContext(settings, session_path=settings.session_file, transport=backend.transport) as second:
            assert second.session.username == "alice"
            await second.dashboard.reload()
            second.forms.logout()

        async with TrackerContext(settings, session_path=settings.session_file, transport=backend.transport) as third:
            assert third.session.token is None
