from arranke_toolkit.auth.in_memory import InMemoryAuthProvider
from arranke_toolkit.auth.session_context import SessionContext
from conftest import ALICE, BOB


async def test_start_reads_current_session(auth_provider):
    async with SessionContext(auth_provider) as session:
        assert session.is_authenticated
        assert session.user == ALICE


async def test_listeners_follow_sign_in_and_out():
    provider = InMemoryAuthProvider()
    seen = []
    async with SessionContext(provider) as session:
        session.subscribe(seen.append)

        await provider.sign_in(BOB)
        assert session.user == BOB
        await provider.sign_out()
        assert session.user is None

    assert seen == [BOB, None]


async def test_same_user_signing_in_again_is_not_republished(auth_provider):
    seen = []
    async with SessionContext(auth_provider) as session:
        session.subscribe(seen.append)
        await auth_provider.sign_in(ALICE)

        assert session.user == ALICE

    assert seen == []


async def test_close_stops_following_provider():
    provider = InMemoryAuthProvider()
    session = SessionContext(provider)
    await session.start()
    session.close()

    await provider.sign_in(ALICE)

    assert session.user is None
