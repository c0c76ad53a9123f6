import logging

from ecash.bank import *
from ecash.blind_signature import *
from ecash.coin import *
from ecash.detection import *
from ecash.merchant import *
from ecash.pack import *


def blind_signature_example(bank):
    user = RsaUser(bank.public)
    message = "Hello world"

    blinded, factor = user.blind(message)
    sig = user.unblind(bank.sign_coin(blinded), factor)

    assert bank.public.verify_signature(sig, message)
    print(f"Signature: {sig.repr()}")


def double_spending_example(bank):
    # Create a new coin for 'alice' worth 20 units
    coin = Coin("alice", 20, bank.n, bank.e, ris_length=10)

    # Bank signs the coin, the coin holder unblinds the signature
    coin.receive_signature(bank.sign_coin(coin.blind()))
    coin.unblind()

    # The same coin is spent at two merchants
    ris1 = Merchant("merchant1").accept(coin)
    ris2 = Merchant("merchant2").accept(coin)

    outcome = determine_cheater(ris1, ris2)
    if isinstance(outcome, DoubleSpent):
        print(f"Double-spender detected! Coin {outcome.guid} was double-spent by {outcome.identity}")
    else:
        print(f"Merchant cheated for coin {outcome.guid}!")

    # The same identity strings reported twice
    outcome = determine_cheater(ris1, ris1)
    print(f"Merchant cheated for coin {outcome.guid}!")
    return ris1, ris2


def deposit_example(bank, ris1, ris2):
    bank.deposit("merchant1", unpackb(packb(ris1)))
    print(bank.deposit("merchant2", unpackb(packb(ris2))))


def main():
    logging.basicConfig(level=logging.INFO)
    bank = Bank()
    blind_signature_example(bank)
    ris1, ris2 = double_spending_example(bank)
    deposit_example(bank, ris1, ris2)


if __name__ == "__main__":
    main()
