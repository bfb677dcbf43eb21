# =============================================================================
# lib/ledger.py - IP Filing Ledger Client
# =============================================================================
# Records IP filing decisions on-chain by calling the IPR smart contract:
#   acceptIPR(string iprId, string message)
#   rejectIPR(string iprId, string message)
#
# One call = build, sign, send, wait for the receipt. There is no retry and
# no reconciliation; callers decide what to do with a failure.
#
# Failure taxonomy:
# - LedgerNotConfiguredError: RPC URL / contract / key missing
# - LedgerRejectedBySignerError: the signer refused (JSON-RPC code 4001)
# - LedgerTransactionError: anything else (network, revert, timeout)
#
# Usage:
#   from lib.ledger import LedgerClient
#
#   ledger = LedgerClient.from_settings()
#   tx_hash = ledger.submit_decision(filing_id, "Accepted", "Novel claims")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted

from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

# Minimal ABI: only the two decision methods are called
IPR_CONTRACT_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": name,
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "iprId", "type": "string"},
            {"name": "message", "type": "string"},
        ],
        "outputs": [],
    }
    for name in ("acceptIPR", "rejectIPR")
]

DECISION_METHODS = {
    "Accepted": "acceptIPR",
    "Rejected": "rejectIPR",
}

# EIP-1193 "User Rejected Request"
USER_REJECTED_CODE = 4001


# =============================================================================
# Errors
# =============================================================================

class LedgerError(ApplicationError):
    """Base class for ledger failures."""

    def __init__(self, message: str, code: str = "LEDGER_ERROR", **kwargs):
        super().__init__(message, code=code, **kwargs)


class LedgerNotConfiguredError(LedgerError):
    """Raised when ledger settings are missing."""

    def __init__(self, missing: list[str]):
        super().__init__(
            f"Ledger is not configured (missing: {', '.join(missing)})",
            code="LEDGER_NOT_CONFIGURED",
            suggestion="Set LEDGER_RPC_URL, LEDGER_CONTRACT_ADDRESS and LEDGER_PRIVATE_KEY",
            details={"missing": missing},
        )


class LedgerRejectedBySignerError(LedgerError):
    """Raised when the signing account refuses the transaction."""

    def __init__(self, filing_id: str):
        super().__init__(
            "Transaction was rejected by the signer",
            code="LEDGER_USER_REJECTED",
            suggestion="Approve the transaction in the signing wallet and review again",
            details={"filing_id": filing_id},
        )


class LedgerTransactionError(LedgerError):
    """Raised when sending or confirming the transaction fails."""

    def __init__(self, message: str, filing_id: str, tx_hash: str | None = None):
        details = {"filing_id": filing_id}
        if tx_hash:
            details["tx_hash"] = tx_hash
        super().__init__(
            message,
            code="LEDGER_TRANSACTION_FAILED",
            suggestion="Check the RPC endpoint and the reviewer account's balance",
            details=details,
        )


def is_user_rejection(error: BaseException) -> bool:
    """True if an RPC error means the signer refused (code 4001 / 'user rejected')."""
    for arg in getattr(error, "args", ()):
        if isinstance(arg, dict) and arg.get("code") == USER_REJECTED_CODE:
            return True
    text = str(error).lower()
    return "user rejected" in text or "user denied" in text


# =============================================================================
# Client
# =============================================================================

class LedgerClient:
    """
    Thin web3.py wrapper around the IPR contract.

    Args:
        rpc_url: JSON-RPC endpoint
        contract_address: Deployed IPR contract
        private_key: Key of the account that signs decisions
        chain_id: Chain id for replay protection
        receipt_timeout: Seconds to wait for confirmation
        explorer_url: Block explorer base URL
        web3: Pre-built Web3 instance (tests)
    """

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        private_key: str,
        chain_id: int,
        receipt_timeout: int = 120,
        explorer_url: str = "",
        web3: Web3 | None = None,
    ):
        self.web3 = web3 or Web3(Web3.HTTPProvider(rpc_url))
        self.contract = self.web3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=IPR_CONTRACT_ABI,
        )
        self.account = self.web3.eth.account.from_key(private_key)
        self.chain_id = chain_id
        self.receipt_timeout = receipt_timeout
        self.explorer_url = explorer_url.rstrip("/")

    @classmethod
    def from_settings(cls) -> "LedgerClient":
        """
        Build a client from app settings.

        Raises:
            LedgerNotConfiguredError: If any required setting is empty
        """
        from app.config import settings

        missing = [
            name for name in ("LEDGER_RPC_URL", "LEDGER_CONTRACT_ADDRESS", "LEDGER_PRIVATE_KEY")
            if not getattr(settings, name)
        ]
        if missing:
            raise LedgerNotConfiguredError(missing)

        return cls(
            rpc_url=settings.LEDGER_RPC_URL,
            contract_address=settings.LEDGER_CONTRACT_ADDRESS,
            private_key=settings.LEDGER_PRIVATE_KEY,
            chain_id=settings.LEDGER_CHAIN_ID,
            receipt_timeout=settings.LEDGER_RECEIPT_TIMEOUT_SECONDS,
            explorer_url=settings.LEDGER_EXPLORER_URL,
        )

    def explorer_link(self, tx_hash: str) -> str:
        """Block explorer URL for a transaction."""
        return f"{self.explorer_url}/tx/{tx_hash}"

    def submit_decision(self, filing_id: str, status: str, message: str) -> str:
        """
        Record an accept/reject decision and wait for it to be mined.

        Args:
            filing_id: IP filing id (stored on-chain as a string)
            status: "Accepted" or "Rejected"
            message: Reviewer's message

        Returns:
            Transaction hash (0x-prefixed hex)

        Raises:
            ValueError: If status is not a decision
            LedgerRejectedBySignerError: If the signer refused
            LedgerTransactionError: On any other failure, including a reverted receipt
        """
        method_name = DECISION_METHODS.get(status)
        if method_name is None:
            raise ValueError(f"Not a ledger decision: {status}")

        method = getattr(self.contract.functions, method_name)
        tx_hash: str | None = None

        try:
            transaction = method(str(filing_id), message or "").build_transaction({
                "from": self.account.address,
                "nonce": self.web3.eth.get_transaction_count(self.account.address),
                "chainId": self.chain_id,
            })
            signed = self.account.sign_transaction(transaction)
            raw_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
            tx_hash = Web3.to_hex(raw_hash)
            logger.info(f"Sent {method_name} for filing {filing_id}: {tx_hash}")

            receipt = self.web3.eth.wait_for_transaction_receipt(
                raw_hash, timeout=self.receipt_timeout
            )

        except TimeExhausted:
            raise LedgerTransactionError(
                f"No receipt after {self.receipt_timeout}s",
                filing_id=str(filing_id),
                tx_hash=tx_hash,
            )
        except ContractLogicError as e:
            raise LedgerTransactionError(
                f"Contract rejected {method_name}: {e}",
                filing_id=str(filing_id),
                tx_hash=tx_hash,
            )
        except Exception as e:
            if is_user_rejection(e):
                raise LedgerRejectedBySignerError(str(filing_id))
            raise LedgerTransactionError(
                f"Failed to send {method_name}: {e}",
                filing_id=str(filing_id),
                tx_hash=tx_hash,
            )

        if receipt.get("status") != 1:
            raise LedgerTransactionError(
                f"Transaction reverted: {tx_hash}",
                filing_id=str(filing_id),
                tx_hash=tx_hash,
            )

        logger.info(f"Confirmed {method_name} for filing {filing_id} in block {receipt.get('blockNumber')}")
        return tx_hash
