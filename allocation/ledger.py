from .errors import InsufficientBalance
from .types import Balance, ModuleType


def decrement(balance: Balance, module_type) -> Balance:
    module_type = ModuleType(module_type)
    current = balance.get(module_type)
    if current <= 0:
        raise InsufficientBalance(f"No remaining {module_type.value} tests")
    return balance.with_count(module_type, current - 1)
