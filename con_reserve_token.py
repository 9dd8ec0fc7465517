"""
RESERVE TOKEN

Plain XSC001 fungible token used as the reserve asset bonds are bought
with and redeemed for. Integer amounts only.
"""

INITIAL_SUPPLY = 10**30

balances = Hash(default_value=0)

# (owner, spender) -> int
approvals = Hash(default_value=0)

metadata = Hash()

TransferEvent = LogEvent('Transfer', {
    'from': {'type': str, 'idx': True},
    'to': {'type': str, 'idx': True},
    'amount': {'type': int}
})

ApproveEvent = LogEvent('Approve', {
    'from': {'type': str, 'idx': True},
    'to': {'type': str, 'idx': True},
    'amount': {'type': int}
})

@construct
def seed():
    metadata['token_name'] = "Bond Reserve"
    metadata['token_symbol'] = "RSV"
    metadata['operator'] = ctx.caller
    metadata['total_supply'] = INITIAL_SUPPLY

    balances[ctx.caller] = INITIAL_SUPPLY

@export
def balance_of(address: str):
    return balances[address]

@export
def allowance(owner: str, spender: str):
    return approvals[owner, spender]

@export
def transfer(amount: int, to: str):
    assert amount > 0, 'Cannot send non-positive amounts'
    assert balances[ctx.caller] >= amount, 'Not enough tokens to send'

    balances[ctx.caller] = balances[ctx.caller] - amount
    balances[to] = balances[to] + amount

    TransferEvent({'from': ctx.caller, 'to': to, 'amount': amount})
    return True

@export
def approve(amount: int, to: str):
    assert amount >= 0, 'Cannot approve negative amounts'
    approvals[ctx.caller, to] = amount

    ApproveEvent({'from': ctx.caller, 'to': to, 'amount': amount})
    return True

@export
def transfer_from(amount: int, to: str, main_account: str):
    assert amount > 0, 'Cannot send non-positive amounts'
    assert approvals[main_account, ctx.caller] >= amount, 'Not enough tokens approved to send'
    assert balances[main_account] >= amount, 'Not enough tokens to send'

    approvals[main_account, ctx.caller] = approvals[main_account, ctx.caller] - amount
    balances[main_account] = balances[main_account] - amount
    balances[to] = balances[to] + amount

    TransferEvent({'from': main_account, 'to': to, 'amount': amount})
    return True
