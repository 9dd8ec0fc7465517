"""
BOND ADMINS

Authorization collaborator for the bond engine. Answers is_admin(account);
the operator that deployed it grants and revokes admin rights.
"""

admins = Hash(default_value=False)
metadata = Hash()

AdminChangedEvent = LogEvent('AdminChanged', {
    'account': {'type': str, 'idx': True},
    'enabled': {'type': bool}
})

@construct
def seed():
    metadata['operator'] = ctx.caller
    admins[ctx.caller] = True

@export
def is_admin(account: str):
    return admins[account] is True

@export
def set_admin(account: str, enabled: bool):
    assert ctx.caller == metadata['operator'], 'Unauthorized: only operator can change admins'
    assert account != '', 'InvalidAddress: account required'
    admins[account] = enabled

    AdminChangedEvent({'account': account, 'enabled': enabled})
