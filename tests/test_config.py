import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from solana.rpc.commitment import Finalized, Processed

from ondemand.config import (
    StoreConfig,
    load_store_config,
    parse_commitment,
    resolve_rpc_url,
    solana_cli_rpc_url,
)


class ResolveRpcUrlTests(unittest.TestCase):
    def test_explicit_value_and_cluster_names(self) -> None:
        self.assertEqual(resolve_rpc_url("http://node:8899"), "http://node:8899")
        self.assertEqual(resolve_rpc_url("Mainnet"), "https://api.mainnet-beta.solana.com")
        self.assertEqual(resolve_rpc_url("localnet"), "http://127.0.0.1:8899")

    def test_environment_then_solana_cli_config(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg = Path(td) / "config.yml"
            cfg.write_text("---\njson_rpc_url: \"https://api.devnet.solana.com\"\ncommitment: confirmed\n")
            with patch.dict(os.environ, {"SOLANA_CONFIG": str(cfg)}, clear=True):
                self.assertEqual(resolve_rpc_url(), "https://api.devnet.solana.com")
            with patch.dict(os.environ, {"SOLANA_CONFIG": str(cfg), "ONDEMAND_RPC_URL": "testnet"}, clear=True):
                self.assertEqual(resolve_rpc_url(), "https://api.testnet.solana.com")

    def test_solana_cli_rpc_url_reads_only_json_rpc_url(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg = Path(td) / "config.yml"
            cfg.write_text(
                "---\nwebsocket_url: ''\n# json_rpc_url: http://old:8899\n"
                "json_rpc_url: 'http://node:8899'  # local\n"
            )
            with patch.dict(os.environ, {"SOLANA_CONFIG_FILE": str(cfg)}, clear=True):
                self.assertEqual(solana_cli_rpc_url(), "http://node:8899")
            cfg.write_text("json_rpc_url:\n")
            with patch.dict(os.environ, {"SOLANA_CONFIG": str(cfg)}, clear=True):
                self.assertIsNone(solana_cli_rpc_url())

    def test_falls_back_to_mainnet(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            with patch.dict(os.environ, {"SOLANA_CONFIG": str(Path(td) / "none.yml")}, clear=True):
                self.assertEqual(resolve_rpc_url(), "https://api.mainnet-beta.solana.com")


class StoreConfigTests(unittest.TestCase):
    def test_parse_commitment(self) -> None:
        self.assertEqual(parse_commitment(" Finalized "), Finalized)
        self.assertEqual(parse_commitment("processed"), Processed)
        with self.assertRaises(ValueError):
            parse_commitment("max")

    def _write(self, td: str, text: str) -> Path:
        path = Path(td) / "ondemand.toml"
        path.write_text(text)
        return path

    def test_load_store_config(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = self._write(
                td,
                '[store]\nrpc_url = "http://node:8899"\ncommitment = "finalized"\n'
                "skip_program_validation = true\n",
            )
            config = load_store_config(path)
        self.assertEqual(
            config,
            StoreConfig(rpc_url="http://node:8899", commitment=Finalized, skip_program_validation=True),
        )

    def test_rejects_unknown_keys_and_types(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaisesRegex(ValueError, "Unknown store key: retries"):
                load_store_config(self._write(td, "[store]\nretries = 3\n"))
            with self.assertRaisesRegex(ValueError, "allow_missing_accounts must be a boolean"):
                load_store_config(self._write(td, '[store]\nallow_missing_accounts = "yes"\n'))
            with self.assertRaises(FileNotFoundError):
                load_store_config(Path(td) / "missing.toml")


if __name__ == "__main__":
    unittest.main()
