"""
LINEAR PRICING CURVE

Unit n of a bond (1-based) costs n units of the reserve asset.
Minting `units` on top of `supply` therefore costs the arithmetic series
(supply + 1) + ... + (supply + units).

Stateless: any contract exporting price(supply, units) can replace it.
"""

MAX_UINT = 2**256 - 1

@export
def price(supply: int, units: int):
    assert supply >= 0 and units >= 0, 'InvalidAmount: supply and units must be non-negative'
    if units == 0:
        return 0

    first = supply + 1
    last = supply + units
    # multiply before halving: units * (first + last) is always even
    cost = units * (first + last) // 2

    assert cost <= MAX_UINT, 'ArithmeticOverflow: curve price exceeds uint256'
    return cost
