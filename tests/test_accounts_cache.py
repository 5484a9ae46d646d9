import unittest

from solders.account import Account
from solders.pubkey import Pubkey

from ondemand.accounts import AccountCache, default_account
from ondemand.errors import FetchError


def _pk(n: int) -> Pubkey:
    return Pubkey(bytes([n]) * 32)


def _account(lamports: int) -> Account:
    return Account(lamports=lamports, data=b"\x01\x02", owner=_pk(200), executable=False, rent_epoch=0)


class RecordingFetch:
    def __init__(self, known: dict) -> None:
        self.known = known
        self.calls: list = []

    async def __call__(self, pubkeys):
        self.calls.append(list(pubkeys))
        return [self.known.get(pk) for pk in pubkeys]


class AccountCacheTests(unittest.IsolatedAsyncioTestCase):
    async def test_fill_missing_fetches_only_uncached_ids_in_one_call(self) -> None:
        cache = AccountCache()
        cache.seed(_pk(1), _account(1))
        fetch = RecordingFetch({_pk(2): _account(2), _pk(3): _account(3)})

        missing = await cache.fill_missing([_pk(1), _pk(2), _pk(3), _pk(2)], fetch)

        self.assertEqual(missing, [])
        self.assertEqual(fetch.calls, [[_pk(2), _pk(3)]])
        self.assertEqual(cache.get(_pk(2)), _account(2))
        self.assertEqual(len(cache), 3)

    async def test_second_fill_with_same_ids_makes_no_call(self) -> None:
        cache = AccountCache()
        fetch = RecordingFetch({_pk(2): _account(2)})
        await cache.fill_missing([_pk(2), _pk(4)], fetch)
        await cache.fill_missing([_pk(2), _pk(4)], fetch)
        self.assertEqual(len(fetch.calls), 1)

    async def test_absent_ids_are_reported_and_not_requeried(self) -> None:
        cache = AccountCache()
        fetch = RecordingFetch({})
        first = await cache.fill_missing([_pk(5)], fetch)
        second = await cache.fill_missing([_pk(5)], fetch)

        self.assertEqual(first, [_pk(5)])
        self.assertEqual(second, [_pk(5)])
        self.assertEqual(len(fetch.calls), 1)
        self.assertNotIn(_pk(5), cache)
        self.assertTrue(cache.is_absent(_pk(5)))

    async def test_seeded_mock_is_not_overwritten_by_fill(self) -> None:
        cache = AccountCache()
        mock = _account(42)
        cache.seed(_pk(1), mock)
        fetch = RecordingFetch({_pk(1): _account(7)})
        await cache.fill_missing([_pk(1)], fetch)
        self.assertEqual(fetch.calls, [])
        self.assertEqual(cache.get(_pk(1)).lamports, 42)

    async def test_failed_fetch_applies_nothing(self) -> None:
        cache = AccountCache()

        async def broken(pubkeys):
            raise FetchError("transport down")

        with self.assertRaises(FetchError):
            await cache.fill_missing([_pk(1), _pk(2)], broken)
        self.assertEqual(len(cache), 0)
        self.assertFalse(cache.is_absent(_pk(1)))

    async def test_misaligned_fetch_result_is_a_fetch_error(self) -> None:
        cache = AccountCache()

        async def short(pubkeys):
            return [None]

        with self.assertRaises(FetchError):
            await cache.fill_missing([_pk(1), _pk(2)], short)
        self.assertEqual(len(cache), 0)

    async def test_insert_keeps_absent_mark(self) -> None:
        cache = AccountCache()
        await cache.fill_missing([_pk(1)], RecordingFetch({}))
        cache.insert(_pk(1), default_account())
        self.assertTrue(cache.is_absent(_pk(1)))
        self.assertIn(_pk(1), cache)
        fetch = RecordingFetch({_pk(1): _account(1)})
        self.assertEqual(await cache.fill_missing([_pk(1)], fetch), [_pk(1)])
        self.assertEqual(fetch.calls, [])

    def test_seed_clears_absent_mark_and_overwrites(self) -> None:
        cache = AccountCache()
        cache._absent.add(_pk(1))
        cache.seed(_pk(1), _account(1))
        cache.seed(_pk(1), _account(9))
        self.assertFalse(cache.is_absent(_pk(1)))
        self.assertEqual(cache.get(_pk(1)).lamports, 9)

    def test_enumeration_is_stable(self) -> None:
        cache = AccountCache()
        for n in (3, 1, 2):
            cache.seed(_pk(n), _account(n))
        self.assertEqual(list(cache.items()), list(cache.items()))
        self.assertEqual(list(cache), [_pk(3), _pk(1), _pk(2)])

    def test_default_account_is_empty_and_not_executable(self) -> None:
        account = default_account()
        self.assertEqual(account.lamports, 0)
        self.assertEqual(bytes(account.data), b"")
        self.assertFalse(account.executable)
        self.assertEqual(str(account.owner), "11111111111111111111111111111111")


if __name__ == "__main__":
    unittest.main()
