# =============================================================================
# tests/test_ledger.py - Ledger Client Tests
# =============================================================================
# Tests for LedgerClient with a mocked Web3 instance: the happy path, the
# failure taxonomy, and settings validation. No chain is contacted.
#
# Run with: pytest tests/test_ledger.py -v
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest
from web3.exceptions import ContractLogicError, TimeExhausted

from lib.ledger import (
    LedgerClient,
    LedgerNotConfiguredError,
    LedgerRejectedBySignerError,
    LedgerTransactionError,
    is_user_rejection,
)

CONTRACT_ADDRESS = "0x" + "ab" * 20
RAW_HASH = bytes.fromhex("cd" * 32)
FILING_ID = "f0000000-0000-0000-0000-000000000001"


@pytest.fixture
def web3():
    """A mocked Web3 instance that mines every transaction."""
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.send_raw_transaction.return_value = RAW_HASH
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 1, "blockNumber": 42}
    return w3


@pytest.fixture
def ledger(web3):
    return LedgerClient(
        rpc_url="http://localhost:8545",
        contract_address=CONTRACT_ADDRESS,
        private_key="0x" + "11" * 32,
        chain_id=11155111,
        receipt_timeout=30,
        explorer_url="https://sepolia.etherscan.io/",
        web3=web3,
    )


class TestSubmitDecision:
    """Tests for building, sending and confirming a decision."""

    def test_accept_returns_hash(self, ledger, web3):
        """Test the happy path: acceptIPR is sent and the hash returned."""
        tx_hash = ledger.submit_decision(FILING_ID, "Accepted", "Novel claims")

        assert tx_hash == "0x" + "cd" * 32
        ledger.contract.functions.acceptIPR.assert_called_once_with(FILING_ID, "Novel claims")
        web3.eth.wait_for_transaction_receipt.assert_called_once_with(RAW_HASH, timeout=30)

    def test_reject_uses_reject_method(self, ledger):
        ledger.submit_decision(FILING_ID, "Rejected", "")

        ledger.contract.functions.rejectIPR.assert_called_once_with(FILING_ID, "")
        ledger.contract.functions.acceptIPR.assert_not_called()

    def test_transaction_signed_with_chain_id(self, ledger):
        ledger.submit_decision(FILING_ID, "Accepted", "ok")

        build = ledger.contract.functions.acceptIPR.return_value.build_transaction
        params = build.call_args.args[0]
        assert params["chainId"] == 11155111
        assert params["nonce"] == 7
        ledger.account.sign_transaction.assert_called_once_with(build.return_value)

    def test_pending_is_not_a_decision(self, ledger):
        with pytest.raises(ValueError):
            ledger.submit_decision(FILING_ID, "Pending", "")

    def test_reverted_receipt(self, ledger, web3):
        """Test that a mined-but-reverted transaction is a failure."""
        web3.eth.wait_for_transaction_receipt.return_value = {"status": 0}

        with pytest.raises(LedgerTransactionError) as exc_info:
            ledger.submit_decision(FILING_ID, "Accepted", "")

        assert exc_info.value.code == "LEDGER_TRANSACTION_FAILED"
        assert exc_info.value.details["tx_hash"] == "0x" + "cd" * 32

    def test_receipt_timeout(self, ledger, web3):
        web3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted("no receipt")

        with pytest.raises(LedgerTransactionError) as exc_info:
            ledger.submit_decision(FILING_ID, "Accepted", "")

        assert "30s" in exc_info.value.message

    def test_contract_revert_on_build(self, ledger):
        ledger.contract.functions.acceptIPR.return_value.build_transaction.side_effect = (
            ContractLogicError("execution reverted: already decided")
        )

        with pytest.raises(LedgerTransactionError):
            ledger.submit_decision(FILING_ID, "Accepted", "")

    def test_signer_rejection(self, ledger, web3):
        """Test that JSON-RPC code 4001 maps to the user-rejected error."""
        web3.eth.send_raw_transaction.side_effect = ValueError(
            {"code": 4001, "message": "User rejected the request."}
        )

        with pytest.raises(LedgerRejectedBySignerError) as exc_info:
            ledger.submit_decision(FILING_ID, "Accepted", "")

        assert exc_info.value.code == "LEDGER_USER_REJECTED"

    def test_network_error(self, ledger, web3):
        web3.eth.send_raw_transaction.side_effect = ConnectionError("connection refused")

        with pytest.raises(LedgerTransactionError) as exc_info:
            ledger.submit_decision(FILING_ID, "Accepted", "")

        assert "connection refused" in exc_info.value.message


class TestHelpers:
    def test_explorer_link(self, ledger):
        assert ledger.explorer_link("0xabc") == "https://sepolia.etherscan.io/tx/0xabc"

    def test_is_user_rejection(self):
        assert is_user_rejection(ValueError({"code": 4001}))
        assert is_user_rejection(RuntimeError("MetaMask: User denied transaction signature"))
        assert not is_user_rejection(RuntimeError("nonce too low"))


class TestFromSettings:
    """Tests for building the client from configuration."""

    def test_missing_settings(self):
        with patch("app.config.settings") as settings:
            settings.LEDGER_RPC_URL = ""
            settings.LEDGER_CONTRACT_ADDRESS = CONTRACT_ADDRESS
            settings.LEDGER_PRIVATE_KEY = ""

            with pytest.raises(LedgerNotConfiguredError) as exc_info:
                LedgerClient.from_settings()

        assert exc_info.value.details["missing"] == ["LEDGER_RPC_URL", "LEDGER_PRIVATE_KEY"]
