import pytest
from stakecluster.protocol.crypto.addresses import (
    decode_address, decode_bech32, encode_bech32, is_valid_address, reward_address,
    resolve_payment_credential, resolve_staking_credential
)
from stakecluster.protocol.types.common import AddressType, MalformedAddress

def test_payment_credential_is_addr_vkh(make_address):
    addr = make_address(payment=1, stake=2)

    credential = resolve_payment_credential(addr)

    assert credential.startswith("addr_vkh1")
    assert credential == encode_bech32("addr_vkh", bytes([1]) * 28)

def test_payment_credential_ignores_network_and_address_type(make_address):
    """Addresses differing only in network tag or type byte share the credential."""
    base_testnet = make_address(payment=7, stake=3, network_id=0)
    enterprise_mainnet = make_address(payment=7, network_id=1)
    other_key = make_address(payment=8, stake=3, network_id=0)

    assert resolve_payment_credential(base_testnet) == resolve_payment_credential(enterprise_mainnet)
    assert resolve_payment_credential(base_testnet) != resolve_payment_credential(other_key)

def test_base_address_exceeds_bip173_length(make_address):
    addr = make_address(payment=1, stake=2)
    assert len(addr) > 90

    hrp, payload = decode_bech32(addr)
    assert hrp == "addr_test"
    assert len(payload) == 57

def test_staking_credential_bound_to_network(make_address):
    addr = make_address(payment=1, stake=2, network_id=0)

    testnet = resolve_staking_credential(addr, 0)
    mainnet = resolve_staking_credential(addr, 1)

    assert testnet.startswith("stake_test1")
    assert mainnet.startswith("stake1")
    assert decode_bech32(testnet)[1] == bytes([0xE0]) + bytes([2]) * 28
    assert decode_bech32(mainnet)[1] == bytes([0xE1]) + bytes([2]) * 28

def test_script_stake_part_gives_script_reward_address(make_address):
    addr = make_address(payment=1, stake=2, stake_script=True)

    credential = resolve_staking_credential(addr, 0)

    assert credential == reward_address(bytes([2]) * 28, 0, is_script=True)
    assert decode_bech32(credential)[1][0] == 0xF0

def test_enterprise_address_has_no_staking_credential(make_address):
    addr = make_address(payment=5)

    assert resolve_staking_credential(addr, 0) is None
    assert resolve_payment_credential(addr).startswith("addr_vkh1")

def test_pointer_address_has_no_staking_credential():
    addr = encode_bech32("addr_test", bytes([0x40]) + bytes([4]) * 28 + bytes([1, 2, 3]))

    decoded = decode_address(addr)

    assert decoded.address_type == AddressType.POINTER_KEY
    assert resolve_staking_credential(addr, 0) is None
    assert resolve_payment_credential(addr) == encode_bech32("addr_vkh", bytes([4]) * 28)

def test_script_payment_part_is_rejected(make_address):
    addr = make_address(payment=1, stake=2, payment_script=True)

    with pytest.raises(MalformedAddress, match="script payment"):
        resolve_payment_credential(addr)

    # Staking part is still usable
    assert resolve_staking_credential(addr, 0) == reward_address(bytes([2]) * 28, 0)

def test_reward_address_has_no_payment_credential(make_address):
    addr = make_address(stake=9, network_id=1)

    with pytest.raises(MalformedAddress, match="no payment credential"):
        resolve_payment_credential(addr)

    # Re-bound to the requested network
    assert resolve_staking_credential(addr, 0) == reward_address(bytes([9]) * 28, 0)

@pytest.mark.parametrize("text", [
    "",
    "not-an-address",
    "Ae2tdPwUPEZFRbyhz3cpfC2CumGzNkFBN2L42rcUc2yjQpEkxDbkPodpMAi",
    "addr_test1qqqqqq",
])
def test_undecodable_text_is_malformed(text):
    with pytest.raises(MalformedAddress):
        resolve_payment_credential(text)
    with pytest.raises(MalformedAddress):
        resolve_staking_credential(text, 0)

def test_bad_checksum_is_malformed(make_address):
    addr = make_address(payment=1, stake=2)
    tampered = addr[:-1] + ("q" if addr[-1] != "q" else "p")

    with pytest.raises(MalformedAddress, match="checksum"):
        decode_address(tampered)

def test_mixed_case_is_malformed(make_address):
    addr = make_address(payment=1, stake=2)
    mixed = addr[:10] + addr[10:].upper()

    with pytest.raises(MalformedAddress):
        decode_address(mixed)

def test_upper_case_address_decodes(make_address):
    addr = make_address(payment=1, stake=2)

    assert resolve_payment_credential(addr.upper()) == resolve_payment_credential(addr)

def test_wrong_body_length_is_malformed():
    addr = encode_bech32("addr_test", bytes([0x00]) + bytes([1]) * 30)

    with pytest.raises(MalformedAddress, match="base address body"):
        decode_address(addr)

def test_is_valid_address(make_address):
    addr = make_address(payment=1, stake=2)

    assert is_valid_address(addr)
    assert is_valid_address(addr, expected_prefix="addr_test")
    assert not is_valid_address(addr, expected_prefix="addr")
    assert not is_valid_address("garbage")
