import hashlib

# ---- Chain-constant parameters & helpers (mirror contracts) ----

BASIS_POINTS = 10000
MAX_UINT = 2**256 - 1
BOND_ID_LENGTH = 64

def make_bond_id(label: str) -> str:
    # Fixed-size id accepted by con_autobond.create_bond
    return hashlib.sha3_256(("AUTOBOND:bond|" + label).encode("utf-8")).hexdigest()

def check_basis_points(basis_points: int) -> int:
    if isinstance(basis_points, bool) or not isinstance(basis_points, int):
        raise ValueError(f"basis points must be an int, got {basis_points!r}")
    if not 0 <= basis_points <= BASIS_POINTS:
        raise ValueError(f"basis points must be in [0, {BASIS_POINTS}]: {basis_points}")
    return basis_points

def linear_price(supply: int, units: int) -> int:
    # Mirrors con_linear_curve.price
    if supply < 0 or units < 0:
        raise ValueError("supply and units must be non-negative")
    if units == 0:
        return 0
    cost = units * ((supply + 1) + (supply + units)) // 2
    if cost > MAX_UINT:
        raise OverflowError("curve price exceeds uint256")
    return cost

def split_fee(basis_points: int, total: int):
    # Mirrors con_autobond split_fee: (fee, remainder)
    check_basis_points(basis_points)
    if total < 0:
        raise ValueError("total must be non-negative")
    fee = total * basis_points // BASIS_POINTS
    return fee, total - fee

def apply_slippage(value: int, slippage_bps: int, upward: bool) -> int:
    check_basis_points(slippage_bps)
    margin = value * slippage_bps // BASIS_POINTS
    return value + margin if upward else value - margin

# ---- High-level builders -----------------------------------------------------

def build_buy(supply: int,
              units: int,
              beneficiary_basis_points: int = 0,
              slippage_bps: int = 0):
    """
    Returns args for contract.buy():
        (bond_id, amount, max_price)
    plus the expected fee breakdown. You still supply `bond_id` when calling
    the chain method, and must approve `total_price` (or `max_price`) of the
    reserve token to the bond contract first.
    """
    if units <= 0:
        raise ValueError("units must be positive")

    total_price = linear_price(supply, units)
    beneficiary_fee, net_price = split_fee(beneficiary_basis_points, total_price)

    return {
        'amount': units,
        'max_price': apply_slippage(total_price, slippage_bps, upward=True),
        'total_price': total_price,
        'beneficiary_fee': beneficiary_fee,
        'net_price': net_price
    }

def build_sell(supply: int,
               units: int,
               beneficiary_basis_points: int,
               slippage_bps: int = 0):
    """
    Returns args for contract.sell():
        (bond_id, amount, min_value)
    Value is the curve integral over the units being removed, less the
    beneficiary fee.
    """
    if units <= 0:
        raise ValueError("units must be positive")
    if units > supply:
        raise ValueError("cannot sell more units than the bond supply")

    subtotal = linear_price(supply - units, units)
    beneficiary_fee, net_value = split_fee(beneficiary_basis_points, subtotal)

    return {
        'amount': units,
        'min_value': apply_slippage(net_value, slippage_bps, upward=False),
        'subtotal': subtotal,
        'beneficiary_fee': beneficiary_fee,
        'net_value': net_value
    }

def preview_withdrawal(withdrawable: int, network_fee_basis_points: int):
    """
    What contract.withdraw() will pay out of `withdrawable`:
    the treasury takes the network fee, the account gets the rest.
    """
    if withdrawable <= 0:
        raise ValueError("nothing to withdraw")
    network_fee, paid_out = split_fee(network_fee_basis_points, withdrawable)
    return {
        'amount': withdrawable,
        'network_fee': network_fee,
        'paid_out': paid_out
    }

# ---- Convenience: wallet-side position tracker (optional) -------------------

class BondPosition:
    """
    Optional local helper to follow one holder's position in a bond
    between chain reads. Tracks the bond supply as last seen and the
    holder's units.
    """
    def __init__(self, beneficiary_basis_points: int, supply: int = 0, units: int = 0):
        self.beneficiary_basis_points = check_basis_points(beneficiary_basis_points)
        self.supply = supply
        self.units = units

    def apply_buy(self, units: int):
        plan = build_buy(self.supply, units, self.beneficiary_basis_points)
        self.supply += units
        self.units += units
        return plan

    def apply_sell(self, units: int):
        if units > self.units:
            raise ValueError("cannot sell more units than held")
        plan = build_sell(self.supply, units, self.beneficiary_basis_points)
        self.supply -= units
        self.units -= units
        return plan
