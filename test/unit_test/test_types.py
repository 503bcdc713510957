"""
Test Types Module

Tests for rollup_web_sdk.types package.
"""

import dataclasses
import unittest

from rollup_web_sdk.types import (
    AppInitState,
    AppInitAction,
    AppInitStatus,
    RollupProviderStatus,
    chain_id_to_network,
    parse_chain_id,
)
from rollup_web_sdk.errors import ConfigurationError


class TestNetwork(unittest.TestCase):

    def test_known_chains(self):
        self.assertEqual(chain_id_to_network(1), "mainnet")
        self.assertEqual(chain_id_to_network(5), "goerli")
        self.assertEqual(chain_id_to_network(1337), "ganache")

    def test_unknown_chain(self):
        self.assertEqual(chain_id_to_network(99999), "unknown (chain 99999)")

    def test_parse_chain_id_formats(self):
        self.assertEqual(parse_chain_id(1), 1)
        self.assertEqual(parse_chain_id("0x5"), 5)
        self.assertEqual(parse_chain_id("0X2A"), 42)
        self.assertEqual(parse_chain_id(" 1337 "), 1337)

    def test_parse_chain_id_rejects(self):
        for value in ("mainnet", "", "0x", 0, -1, True, None, 1.5):
            with self.subTest(value=value):
                with self.assertRaises(ConfigurationError):
                    parse_chain_id(value)


class TestAppInitStatus(unittest.TestCase):

    def test_defaults(self):
        status = AppInitStatus()

        self.assertEqual(status.init_state, AppInitState.UNINITIALIZED)
        self.assertIsNone(status.init_action)
        self.assertIsNone(status.account)
        self.assertIsNone(status.network)
        self.assertIsNone(status.message)
        self.assertFalse(status.is_initialized)
        self.assertFalse(status.is_initializing)

    def test_frozen(self):
        status = AppInitStatus(init_state=AppInitState.INITIALIZED, account="0xabc")

        with self.assertRaises(dataclasses.FrozenInstanceError):
            status.account = "0xdef"

        self.assertTrue(status.is_initialized)

    def test_str(self):
        status = AppInitStatus(
            init_state=AppInitState.INITIALIZING,
            init_action=AppInitAction.LINK_AZTEC_ACCOUNT,
            account="0xabc",
        )

        self.assertEqual(str(status), "AppInitStatus(INITIALIZING, LINK_AZTEC_ACCOUNT, account=0xabc)")
        self.assertTrue(status.is_initializing)

    def test_equality(self):
        self.assertEqual(AppInitStatus(), AppInitStatus())
        self.assertNotEqual(AppInitStatus(), AppInitStatus(network="mainnet"))


class TestRollupProviderStatus(unittest.TestCase):

    def test_from_json(self):
        status = RollupProviderStatus.from_json({
            "chainId": 1,
            "networkOrHost": "mainnet",
            "rollupContractAddress": "0x" + "ab" * 20,
        })

        self.assertEqual(status.chain_id, 1)
        self.assertEqual(status.network, "mainnet")
        self.assertEqual(status.rollup_contract_address, "0x" + "ab" * 20)

    def test_from_json_minimal(self):
        status = RollupProviderStatus.from_json({"chainId": "0x539", "networkOrHost": None})

        self.assertEqual(status.chain_id, 1337)
        self.assertEqual(status.network_or_host, "")
        self.assertIsNone(status.rollup_contract_address)

    def test_from_json_missing_chain_id(self):
        with self.assertRaises(KeyError):
            RollupProviderStatus.from_json({})


if __name__ == "__main__":
    unittest.main()
