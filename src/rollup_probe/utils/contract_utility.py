import json
from pathlib import Path
from typing import Any

CONTRACTS_DIR = Path(__file__).parent.parent / "contracts"


def get_contract_abi(contract_name: str) -> list[dict[str, Any]]:
    """Fetches ABI of the given contract from the contracts folder.

    Args:
        contract_name: Name of the contract (without .json extension)

    Returns:
        List of ABI dictionaries for the contract

    Raises:
        FileNotFoundError: If the contract file doesn't exist
        json.JSONDecodeError: If the contract file is invalid JSON
    """
    contract_path: Path = (CONTRACTS_DIR / f"{contract_name}.json").resolve()

    with contract_path.open() as file:
        contract_data: dict[str, Any] = json.load(file)

    return contract_data["abi"]
