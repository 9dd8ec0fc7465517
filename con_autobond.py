"""
AUTOBOND

Bonds are fungible positions minted (bought) and redeemed (sold) against a
pool backed by a reserve token. Every buy and sell pays a fixed share of its
value to the bond's beneficiary; when fees are withdrawn the platform
treasury takes the network fee share.

Collaborators, chosen at deployment:
  - reserve_token: XSC001 token holding the reserve
  - curve:         contract exporting price(supply, units)
  - authority:     contract exporting is_admin(account)

Every failure is an assert whose message starts with the error name.
"""

I = importlib

BASIS_POINTS = 10000  # 100.00%
MAX_UINT = 2**256 - 1
BOND_ID_LENGTH = 64
HEX_DIGITS = '0123456789abcdef'
MAX_METADATA_LENGTH = 256

reserve_interface = [
    I.Func('transfer_from', args=('amount', 'to', 'main_account')),
    I.Func('transfer', args=('amount', 'to')),
    I.Func('balance_of', args=('address',)),
]

curve_interface = [
    I.Func('price', args=('supply', 'units')),
]

authority_interface = [
    I.Func('is_admin', args=('account',)),
]

# -----------------------------------------------------------------------------
# State
# -----------------------------------------------------------------------------

# bond_id -> {'beneficiary', 'beneficiary_basis_points', 'purchase_price',
#             'supply', 'metadata', 'creator'}
bonds = Hash()

# (bond_id, holder) -> units
balances = Hash(default_value=0)

# account -> reserve owed from fees
withdrawable = Hash(default_value=0)

# configuration
metadata = Hash()

engine_lock = Variable(default_value=False)

# Events
BondCreatedEvent = LogEvent('BondCreated', {
    'bond_id': {'type': str, 'idx': True},
    'beneficiary': {'type': str, 'idx': True},
    'beneficiary_basis_points': {'type': int},
    'purchase_price': {'type': int},
    'metadata': {'type': str}
})

PurchasePriceChangedEvent = LogEvent('PurchasePriceChanged', {
    'bond_id': {'type': str, 'idx': True},
    'old_price': {'type': int},
    'new_price': {'type': int}
})

PurchasedEvent = LogEvent('Purchased', {
    'bond_id': {'type': str, 'idx': True},
    'purchaser': {'type': str, 'idx': True},
    'units': {'type': int},
    'paid': {'type': int},
    'purchase_price_at_time': {'type': int}
})

SoldEvent = LogEvent('Sold', {
    'bond_id': {'type': str, 'idx': True},
    'seller': {'type': str, 'idx': True},
    'units': {'type': int},
    'received': {'type': int},
    'beneficiary_fee': {'type': int}
})

WithdrawalEvent = LogEvent('Withdrawal', {
    'account': {'type': str, 'idx': True},
    'amount': {'type': int},
    'network_fee': {'type': int},
    'paid_out': {'type': int}
})

NetworkFeeChangedEvent = LogEvent('NetworkFeeChanged', {
    'changed_by': {'type': str, 'idx': True},
    'old_basis_points': {'type': int},
    'new_basis_points': {'type': int}
})

ExperimentStoppedEvent = LogEvent('ExperimentStopped', {
    'stopped_by': {'type': str, 'idx': True}
})

# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------

@construct
def seed(network_fee_basis_points: int, reserve_token: str, curve: str, treasury: str, authority: str):
    assert reserve_token != '', 'InvalidAddress: reserve token required'
    assert curve != '', 'InvalidAddress: curve required'
    assert treasury != '', 'InvalidAddress: treasury required'
    assert authority != '', 'InvalidAddress: authority required'
    assert_basis_points(network_fee_basis_points)

    assert I.enforce_interface(I.import_module(reserve_token), reserve_interface), 'InvalidInterface: reserve token is not XSC001-compliant'
    assert I.enforce_interface(I.import_module(curve), curve_interface), 'InvalidInterface: curve must export price(supply, units)'
    assert I.enforce_interface(I.import_module(authority), authority_interface), 'InvalidInterface: authority must export is_admin(account)'

    metadata['operator'] = ctx.caller
    metadata['network_fee_basis_points'] = network_fee_basis_points
    metadata['reserve_token'] = reserve_token
    metadata['curve'] = curve
    metadata['treasury'] = treasury
    metadata['authority'] = authority
    metadata['stopped'] = False

    engine_lock.set(False)

# -----------------------------------------------------------------------------
# Pure helpers
# -----------------------------------------------------------------------------

def assert_basis_points(basis_points):
    assert basis_points >= 0 and basis_points <= BASIS_POINTS, 'BasisPointsOutOfRange: basis points must be in [0, 10000]'

def assert_uint(value):
    assert value <= MAX_UINT, 'ArithmeticOverflow: value exceeds uint256'

def split_fee(basis_points: int, total: int):
    # fee = floor(total * bp / 10000); fee + remainder == total
    assert_basis_points(basis_points)
    fee = total * basis_points // BASIS_POINTS
    return fee, total - fee

def curve_price(supply: int, units: int):
    cost = I.import_module(metadata['curve']).price(supply=supply, units=units)
    assert_uint(cost)
    return cost

def is_valid_bond_id(bond_id):
    if len(bond_id) != BOND_ID_LENGTH:
        return False
    for char in bond_id:
        if char not in HEX_DIGITS:
            return False
    return True

# -----------------------------------------------------------------------------
# Registry & ledger internals
# -----------------------------------------------------------------------------

def get_existing_bond(bond_id):
    bond = bonds[bond_id]
    assert bond is not None, 'NotFound: no bond registered under this id'
    return bond

def mint_units(bond_id, holder, units):
    bond = bonds[bond_id]
    supply = bond['supply'] + units
    assert_uint(supply)

    balances[bond_id, holder] = balances[bond_id, holder] + units
    bond['supply'] = supply
    bonds[bond_id] = bond
    return supply

def burn_units(bond_id, holder, units):
    held = balances[bond_id, holder]
    assert held >= units, 'InsufficientBalance: not enough bond units held'

    bond = bonds[bond_id]
    balances[bond_id, holder] = held - units
    bond['supply'] = bond['supply'] - units
    bonds[bond_id] = bond

def credit(account, amount):
    balance = withdrawable[account] + amount
    assert_uint(balance)
    withdrawable[account] = balance

def drain(account):
    amount = withdrawable[account]
    assert amount > 0, 'NothingToWithdraw: no fees owed to this account'
    # zeroed before any transfer leaves the contract
    withdrawable[account] = 0
    return amount

# -----------------------------------------------------------------------------
# Guards & collaborators
# -----------------------------------------------------------------------------

def acquire_lock():
    assert not engine_lock.get(), 'EngineBusy: another operation is in progress'
    engine_lock.set(True)

def release_lock():
    engine_lock.set(False)

def assert_running():
    assert not metadata['stopped'], 'ExperimentStopped: the experiment has been stopped'

def assert_admin(account):
    authority = I.import_module(metadata['authority'])
    assert authority.is_admin(account=account), 'Unauthorized: caller is not an admin'

def pull_reserve(sender, amount):
    if amount == 0:
        return
    token = I.import_module(metadata['reserve_token'])
    # XSC001 tokens assert on failure; some return False instead
    ok = token.transfer_from(amount=amount, to=ctx.this, main_account=sender)
    assert ok is not False, 'TransferFailed: reserve token refused transfer in'

def push_reserve(recipient, amount):
    if amount == 0:
        return
    token = I.import_module(metadata['reserve_token'])
    ok = token.transfer(amount=amount, to=recipient)
    assert ok is not False, 'TransferFailed: reserve token refused transfer out'

# -----------------------------------------------------------------------------
# Views
# -----------------------------------------------------------------------------

@export
def get_config():
    return {
        'operator': metadata['operator'],
        'network_fee_basis_points': metadata['network_fee_basis_points'],
        'reserve_token': metadata['reserve_token'],
        'curve': metadata['curve'],
        'treasury': metadata['treasury'],
        'authority': metadata['authority'],
        'stopped': metadata['stopped']
    }

@export
def get_bond(bond_id: str):
    bond = bonds[bond_id]
    if bond is None:
        return {'exists': False, 'bond_id': bond_id}
    return {
        'exists': True,
        'bond_id': bond_id,
        'beneficiary': bond['beneficiary'],
        'beneficiary_basis_points': bond['beneficiary_basis_points'],
        'purchase_price': bond['purchase_price'],
        'supply': bond['supply'],
        'metadata': bond['metadata'],
        'creator': bond['creator']
    }

@export
def balance_of(bond_id: str, holder: str):
    return balances[bond_id, holder]

@export
def get_withdrawable(account: str):
    return withdrawable[account]

@export
def quote_buy(bond_id: str, units: int):
    assert units > 0, 'InvalidAmount: units must be positive'
    bond = get_existing_bond(bond_id)
    total_price = curve_price(bond['supply'], units)
    beneficiary_fee, net_price = split_fee(bond['beneficiary_basis_points'], total_price)
    return {
        'total_price': total_price,
        'beneficiary_fee': beneficiary_fee,
        'net_price': net_price
    }

@export
def quote_sell(bond_id: str, units: int):
    assert units > 0, 'InvalidAmount: units must be positive'
    bond = get_existing_bond(bond_id)
    assert bond['supply'] >= units, 'InsufficientSupply: bond supply is below units'
    subtotal = curve_price(bond['supply'] - units, units)
    beneficiary_fee, net_value = split_fee(bond['beneficiary_basis_points'], subtotal)
    return {
        'subtotal': subtotal,
        'beneficiary_fee': beneficiary_fee,
        'net_value': net_value
    }

@export
def verify_supply_invariant(bond_id: str):
    bond = get_existing_bond(bond_id)
    total = 0
    holders = 0
    for units in balances.all(bond_id):
        total += units
        if units > 0:
            holders += 1
    return {
        'ok': total == bond['supply'],
        'sum_of_balances': total,
        'supply': bond['supply'],
        'holders': holders
    }

# -----------------------------------------------------------------------------
# Bond registry
# -----------------------------------------------------------------------------

@export
def create_bond(bond_id: str, beneficiary: str, beneficiary_basis_points: int, purchase_price: int, metadata_text: str):
    assert_running()
    assert is_valid_bond_id(bond_id), 'InvalidBondId: bond id must be 64 lowercase hex characters'
    assert beneficiary != '', 'InvalidAddress: beneficiary required'
    assert_basis_points(beneficiary_basis_points)
    assert purchase_price >= 0, 'InvalidAmount: purchase price must be non-negative'
    assert_uint(purchase_price)
    assert len(metadata_text) <= MAX_METADATA_LENGTH, 'InvalidMetadata: metadata too long'
    assert bonds[bond_id] is None, 'BondAlreadyExists: bond id already registered'

    bonds[bond_id] = {
        'beneficiary': beneficiary,
        'beneficiary_basis_points': beneficiary_basis_points,
        'purchase_price': purchase_price,
        'supply': 0,
        'metadata': metadata_text,
        'creator': ctx.caller
    }

    BondCreatedEvent({
        'bond_id': bond_id,
        'beneficiary': beneficiary,
        'beneficiary_basis_points': beneficiary_basis_points,
        'purchase_price': purchase_price,
        'metadata': metadata_text
    })

@export
def set_purchase_price(bond_id: str, expected_current: int, new_price: int):
    assert_running()
    bond = get_existing_bond(bond_id)
    assert ctx.caller == bond['beneficiary'], 'Unauthorized: only the beneficiary can set a purchase price'
    assert expected_current == bond['purchase_price'], 'PriceMismatch: current purchase price has changed'
    assert new_price >= 0, 'InvalidAmount: purchase price must be non-negative'
    assert_uint(new_price)

    bond['purchase_price'] = new_price
    bonds[bond_id] = bond

    PurchasePriceChangedEvent({
        'bond_id': bond_id,
        'old_price': expected_current,
        'new_price': new_price
    })

# -----------------------------------------------------------------------------
# Engine
# -----------------------------------------------------------------------------

@export
def buy(bond_id: str, amount: int, max_price: int):
    assert_running()
    acquire_lock()
    assert amount > 0, 'InvalidAmount: amount must be positive'
    assert max_price >= 0, 'InvalidAmount: max price must be non-negative'

    bond = get_existing_bond(bond_id)
    total_price = curve_price(bond['supply'], amount)
    assert total_price <= max_price, 'SlippageExceeded: price is above max price'
    beneficiary_fee, net_price = split_fee(bond['beneficiary_basis_points'], total_price)

    pull_reserve(ctx.caller, total_price)

    credit(bond['beneficiary'], beneficiary_fee)
    mint_units(bond_id, ctx.caller, amount)

    PurchasedEvent({
        'bond_id': bond_id,
        'purchaser': ctx.caller,
        'units': amount,
        'paid': total_price,
        'purchase_price_at_time': bond['purchase_price']
    })

    release_lock()
    return total_price

@export
def sell(bond_id: str, amount: int, min_value: int):
    # not gated by stop(): holders can always exit
    acquire_lock()
    assert amount > 0, 'InvalidAmount: amount must be positive'
    assert min_value >= 0, 'InvalidAmount: min value must be non-negative'

    bond = get_existing_bond(bond_id)
    assert bond['supply'] >= amount, 'InsufficientSupply: bond supply is below amount'
    assert balances[bond_id, ctx.caller] >= amount, 'InsufficientBalance: not enough bond units held'

    subtotal = curve_price(bond['supply'] - amount, amount)
    beneficiary_fee, net_value = split_fee(bond['beneficiary_basis_points'], subtotal)
    assert net_value >= min_value, 'SlippageExceeded: value is below min value'

    burn_units(bond_id, ctx.caller, amount)
    credit(bond['beneficiary'], beneficiary_fee)

    push_reserve(ctx.caller, net_value)

    SoldEvent({
        'bond_id': bond_id,
        'seller': ctx.caller,
        'units': amount,
        'received': net_value,
        'beneficiary_fee': beneficiary_fee
    })

    release_lock()
    return net_value

@export
def withdraw(account: str):
    acquire_lock()
    amount = drain(account)
    network_fee, beneficiary_net = split_fee(metadata['network_fee_basis_points'], amount)

    push_reserve(account, beneficiary_net)
    push_reserve(metadata['treasury'], network_fee)

    WithdrawalEvent({
        'account': account,
        'amount': amount,
        'network_fee': network_fee,
        'paid_out': beneficiary_net
    })

    release_lock()
    return amount

# -----------------------------------------------------------------------------
# Administration
# -----------------------------------------------------------------------------

@export
def stop():
    assert_admin(ctx.caller)
    assert not metadata['stopped'], 'AlreadyStopped: the experiment is already stopped'
    metadata['stopped'] = True

    ExperimentStoppedEvent({'stopped_by': ctx.caller})

@export
def set_network_fee_basis_points(expected_current: int, new_value: int):
    assert_admin(ctx.caller)
    current = metadata['network_fee_basis_points']
    assert expected_current == current, 'PriceMismatch: current network fee has changed'
    assert_basis_points(new_value)
    metadata['network_fee_basis_points'] = new_value

    NetworkFeeChangedEvent({
        'changed_by': ctx.caller,
        'old_basis_points': current,
        'new_basis_points': new_value
    })
