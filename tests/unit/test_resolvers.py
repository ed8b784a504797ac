"""
Tests for address resolution.
"""

import pytest

from enscli.chain import (
    AddressResolver,
    LiteralAddressResolver,
    NameLookupResolver,
    resolver_for,
    resolve_address,
)
from enscli.core.auction import InvalidAddressError

OTHER_ADDRESS = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


class TestLiteral:

    def test_checksums_input(self):
        assert LiteralAddressResolver().resolve(OTHER_ADDRESS.lower()) == OTHER_ADDRESS

    @pytest.mark.parametrize("text", ["0x1234", "0x" + "zz" * 20])
    def test_rejects_malformed(self, text):
        with pytest.raises(InvalidAddressError):
            LiteralAddressResolver().resolve(text)


class TestNameLookup:

    def test_resolves_name(self, backend):
        backend.addresses["wallet.eth"] = OTHER_ADDRESS.lower()
        assert NameLookupResolver(backend).resolve("Wallet.eth") == OTHER_ADDRESS

    def test_unresolvable_name(self, backend):
        with pytest.raises(InvalidAddressError):
            NameLookupResolver(backend).resolve("nobody.eth")


class TestSelection:

    def test_hex_uses_literal(self, backend):
        assert isinstance(resolver_for("0xabc", backend), LiteralAddressResolver)

    def test_name_uses_lookup(self, backend):
        assert isinstance(resolver_for("wallet.eth", backend), NameLookupResolver)

    def test_resolvers_satisfy_protocol(self, backend):
        assert isinstance(LiteralAddressResolver(), AddressResolver)
        assert isinstance(NameLookupResolver(backend), AddressResolver)

    def test_resolve_address(self, backend):
        backend.addresses["wallet.eth"] = OTHER_ADDRESS
        assert resolve_address(backend, " wallet.eth ") == OTHER_ADDRESS
        assert resolve_address(backend, OTHER_ADDRESS) == OTHER_ADDRESS

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_address(self, backend, text):
        with pytest.raises(InvalidAddressError):
            resolve_address(backend, text)
