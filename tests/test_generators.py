"""Tests for synthetic input generators."""

from decimal import Decimal

from bvdu_bank.generators import AccountRequest, AccountRequestGenerator
from bvdu_bank.models import AccountType
from bvdu_bank.services import normalize_upi


class TestAccountRequestGenerator:
    """Tests for AccountRequestGenerator."""

    def test_generate_request(self, seed: int) -> None:
        """generate() returns a request the ledger would accept."""
        gen = AccountRequestGenerator(seed=seed)
        request = gen.generate()

        assert isinstance(request, AccountRequest)
        assert 0 < len(request.name) <= 40
        assert "|" not in request.name
        assert request.account_type in [AccountType.SAVINGS, AccountType.CURRENT]
        assert 1000 <= request.pin <= 9999
        assert request.initial_deposit >= Decimal("500")
        assert request.initial_deposit == request.initial_deposit.quantize(Decimal("0.01"))

    def test_upi_candidates_are_valid_and_unique(self, seed: int) -> None:
        """UPI candidates are valid local parts with no repeats."""
        gen = AccountRequestGenerator(seed=seed)
        candidates = [r.upi_candidate for r in gen.generate_batch(200)]

        assert len(set(candidates)) == 200
        for candidate in candidates:
            assert normalize_upi(candidate) == f"{candidate}@bvdu"

    def test_same_seed_same_requests(self, seed: int) -> None:
        """Same seed produces the same requests."""
        first = list(AccountRequestGenerator(seed=seed).generate_batch(5))
        second = list(AccountRequestGenerator(seed=seed).generate_batch(5))

        assert first == second

    def test_other_locale(self, seed: int) -> None:
        """Non-Indian locales still give alphanumeric UPI candidates."""
        gen = AccountRequestGenerator(seed=seed, locale="en_US")

        assert gen.generate().upi_candidate.isalnum()
