from ivo.conf.settings import DAY_IN_SECONDS
from ivo.nanocontracts.blueprints.crowdsale import (
    CrowdsaleSaleInfo,
    HardCapExceeded,
    InvalidInput,
    IvoCrowdsale,
    SaleNotActive,
    Unauthorized,
)
from ivo.nanocontracts.exception import NCFail, StateViolation
from ivo.nanocontracts.types import (
    NULL_ADDRESS,
    NULL_CONTRACT_ID,
    Amount,
    NCDepositAction,
    NCWithdrawalAction,
    TokenUid,
)
from tests.nanocontracts.blueprints.ivo_sale_case import ONE_TOKEN, START_TIME, IvoSaleTestCase, settings

NATIVE = TokenUid(settings.NATIVE_TOKEN_UID)
CAP_0, CAP_1, HARD_CAP = settings.ROUND_CAPS


class IvoCrowdsaleTestCase(IvoSaleTestCase):
    """Test suite for the IvoCrowdsale blueprint."""

    def _buy(self, beneficiary, value: int, caller=None) -> int:
        return self.call(
            self.crowdsale_id, "buy_tokens", caller or self.owner, beneficiary,
            actions=[NCDepositAction(token_uid=NATIVE, amount=value)],
        )

    def _vault_balance(self, vault_id, account) -> int:
        return self.view(vault_id, "balance_of", account)

    def test_initialize(self):
        self.deploy_token()
        self.deploy_crowdsale()

        contract = self.get_readonly_contract(self.crowdsale_id)
        assert isinstance(contract, IvoCrowdsale)
        self.assertEqual(contract.owner, self.deployer)
        self.assertEqual(contract.managers, {self.deployer})
        self.assertFalse(contract.roles_configured)

        self.assertEqual(self.view(self.crowdsale_id, "rounds"), 3)
        self.assertEqual(self.view(self.crowdsale_id, "rate"), settings.INITIAL_RATE)
        self.assertEqual(self.view(self.crowdsale_id, "fiat_rate"), settings.INITIAL_FIAT_RATE)
        self.assertEqual(self.view(self.crowdsale_id, "starting_time"), START_TIME)
        self.assertEqual(self.view(self.crowdsale_id, "token"), self.token_id)
        self.assertEqual(self.view(self.crowdsale_id, "wallet"), self.wallet)
        self.assertEqual(self.view(self.crowdsale_id, "current_round"), 0)
        self.assertEqual(self.view(self.crowdsale_id, "current_round_cap"), CAP_0)
        self.assertEqual(self.view(self.crowdsale_id, "hard_cap"), HARD_CAP)
        self.assertEqual(self.view(self.crowdsale_id, "cap_of_round", 1), CAP_1)
        self.assertEqual(self.view(self.crowdsale_id, "price_percentage_per_round", 0), 70)
        self.assertEqual(self.view(self.crowdsale_id, "price_percentage_per_round", 2), 100)
        self.assertFalse(self.view(self.crowdsale_id, "paused"))
        self.assertFalse(self.view(self.crowdsale_id, "finalized"))
        self.assertFalse(self.view(self.crowdsale_id, "is_started", self.now))
        self.assertTrue(self.view(self.crowdsale_id, "is_started", START_TIME))

        with self.assertRaises(InvalidInput):
            self.view(self.crowdsale_id, "cap_of_round", 3)

    def test_initialize_invalid_params(self):
        self.deploy_token()
        invalid = [
            (START_TIME, 0, settings.INITIAL_FIAT_RATE, self.wallet, self.token_id),
            (START_TIME, settings.INITIAL_RATE, 0, self.wallet, self.token_id),
            (self.now, settings.INITIAL_RATE, settings.INITIAL_FIAT_RATE, self.wallet, self.token_id),
            (START_TIME, settings.INITIAL_RATE, settings.INITIAL_FIAT_RATE, NULL_ADDRESS, self.token_id),
            (START_TIME, settings.INITIAL_RATE, settings.INITIAL_FIAT_RATE, self.wallet, NULL_CONTRACT_ID),
        ]
        for args in invalid:
            with self.assertRaises(InvalidInput):
                ctx = self.create_context(caller_id=self.deployer)
                self.runner.create_contract(self.crowdsale_id, self.crowdsale_blueprint_id, ctx, *args)

    def test_role_setup(self):
        self.deploy_sale(setup_roles=False)
        self.setup_token_roles()

        with self.assertRaises(Unauthorized):
            self.call(self.crowdsale_id, "role_setup", self.owner,
                      self.owner, self.private_vault_id, self.presale_vault_id, self.reserve_vault_id)
        with self.assertRaises(InvalidInput):
            self.call(self.crowdsale_id, "role_setup", self.deployer,
                      self.owner, NULL_CONTRACT_ID, self.presale_vault_id, self.reserve_vault_id)

        self.setup_crowdsale_roles()
        self.assertEqual(self.view(self.crowdsale_id, "get_owner"), self.owner)
        self.assertTrue(self.view(self.crowdsale_id, "is_manager", self.owner))
        self.assertFalse(self.view(self.crowdsale_id, "is_manager", self.deployer))
        self.assertEqual(self.view(self.crowdsale_id, "num_managers"), 1)

        with self.assertRaises(Unauthorized):
            self.setup_crowdsale_roles()

    def test_purchase_before_role_setup_fails(self):
        self.deploy_sale(setup_roles=False)
        self.call(self.crowdsale_id, "add_whitelisted", self.deployer, self.investor1)
        self.now = START_TIME
        with self.assertRaises(SaleNotActive):
            self.call(self.crowdsale_id, "non_eth_purchase", self.deployer, self.investor1, Amount(ONE_TOKEN))

    def test_purchase_preconditions(self):
        self.deploy_sale()
        self.call(self.crowdsale_id, "add_whitelisted", self.owner, self.investor1)

        with self.assertRaises(SaleNotActive):
            self.buy_fiat(self.investor1, ONE_TOKEN)

        self.start_sale()
        with self.assertRaises(Unauthorized):
            self.buy_fiat(self.investor2, ONE_TOKEN)
        with self.assertRaises(Unauthorized):
            self.call(self.crowdsale_id, "non_eth_purchase", self.investor1, self.investor1, Amount(ONE_TOKEN))
        with self.assertRaises(Unauthorized):
            self._buy(self.investor1, 1000, caller=self.investor1)
        with self.assertRaises(InvalidInput):
            self.buy_fiat(self.investor1, 0)

        self.buy_fiat(self.investor1, ONE_TOKEN)
        self.assertEqual(self.view(self.crowdsale_id, "minted_by_crowdsale"), ONE_TOKEN)

    def test_buy_tokens_in_first_round(self):
        """Tokens of the private round go to the private vault."""
        self.deploy_sale()
        self.start_sale(self.investor1)

        amount = self._buy(self.investor1, 1000)

        # 3.5% fee, then 389 tokens per unit at 70% of the price
        expected = 965 * 389 * 100 // 70
        self.assertEqual(amount, expected)
        self.assertEqual(self.view(self.crowdsale_id, "minted_by_crowdsale"), expected)
        self.assertEqual(self.view(self.crowdsale_id, "wei_raised"), 1000)
        self.assertEqual(self.runner.get_balance(self.crowdsale_id, NATIVE), 1000)
        self.assertEqual(self.token_balance(self.private_vault_id), expected)
        self.assertEqual(self.token_balance(self.investor1), 0)
        self.assertEqual(self._vault_balance(self.private_vault_id, self.investor1), expected)

        event = self.get_events(self.crowdsale_id, "TokensPurchased")[-1]
        self.assertEqual(event.data, {
            "purchaser": self.owner, "beneficiary": self.investor1, "value": 1000, "amount": expected,
        })

    def test_buy_tokens_too_small_fails(self):
        self.deploy_sale()
        self.start_sale(self.investor1)
        with self.assertRaises(InvalidInput):
            self._buy(self.investor1, 1)
        self.assertEqual(self.view(self.crowdsale_id, "wei_raised"), 0)

    def test_buy_tokens_across_rounds(self):
        """A purchase crossing a round cap is split at the price of each round."""
        self.deploy_sale()
        self.start_sale(self.investor1, self.investor2)
        self.buy_fiat(self.investor1, CAP_0 - 1000)

        amount = self._buy(self.investor2, 1000)

        # 1000 tokens fill round 0 and cost ceil(1000 * 70 / 38900) = 2 units,
        # the other 963 units buy at 85% of the price.
        in_round_1 = 963 * 38900 // 85
        self.assertEqual(amount, 1000 + in_round_1)
        self.assertEqual(self.view(self.crowdsale_id, "current_round"), 1)
        self.assertEqual(self._vault_balance(self.private_vault_id, self.investor2), 1000)
        self.assertEqual(self._vault_balance(self.presale_vault_id, self.investor2), in_round_1)
        self.assertEqual(self.view(self.private_vault_id, "total_balance"), CAP_0)

        self.assertEqual(self.get_events(self.crowdsale_id, "RoundStarted")[-1].data, {"round_number": 1})
        self.assertTrue(self.view(self.private_vault_id, "known_release_time"))
        self.assertEqual(
            self.view(self.private_vault_id, "release_time"), self.now + settings.PRIVATE_VAULT_LOCK_PERIOD
        )
        self.assertFalse(self.view(self.presale_vault_id, "known_release_time"))

    def test_buy_tokens_across_two_rounds(self):
        """A single purchase can fill two round caps and finish in the public round."""
        self.deploy_sale()
        self.start_sale(self.investor1, self.investor2)
        self.buy_fiat(self.investor1, CAP_0 - 1000)

        # 2 units fill round 0, round 1 takes its rounded up cost, 1000 units and more are left
        wei_round_1 = -(-(CAP_1 - CAP_0) * 85 // 38900)
        value = (2 + wei_round_1 + 1000) * 1000 // 965 + 1
        available = value * 965 // 1000
        in_round_2 = (available - 2 - wei_round_1) * 38900 // 100

        amount = self._buy(self.investor2, value)

        self.assertEqual(amount, 1000 + (CAP_1 - CAP_0) + in_round_2)
        self.assertGreaterEqual(in_round_2, 1000 * 389)
        self.assertEqual(self.view(self.crowdsale_id, "current_round"), 2)
        self.assertEqual(self.view(self.crowdsale_id, "minted_by_crowdsale"), CAP_1 + in_round_2)
        self.assertEqual(self.view(self.crowdsale_id, "wei_raised"), value)
        self.assertEqual(self._vault_balance(self.private_vault_id, self.investor2), 1000)
        self.assertEqual(self._vault_balance(self.presale_vault_id, self.investor2), CAP_1 - CAP_0)
        self.assertEqual(self.token_balance(self.investor2), in_round_2)

        rounds_started = [event.data for event in self.get_events(self.crowdsale_id, "RoundStarted")]
        self.assertEqual(rounds_started, [{"round_number": 1}, {"round_number": 2}])
        self.assertEqual(self.view(self.presale_vault_id, "release_time"),
                         self.now + settings.PRESALE_VAULT_LOCK_PERIOD)

    def test_non_eth_purchase_after_exact_cap(self):
        """Filling a round exactly starts the next one, so the next token goes to its vault."""
        self.deploy_sale()
        self.start_sale(self.investor1)

        self.buy_fiat(self.investor1, CAP_0)
        self.assertEqual(self.view(self.crowdsale_id, "current_round"), 1)
        self.assertTrue(self.view(self.private_vault_id, "known_release_time"))
        self.assertEqual(self._vault_balance(self.presale_vault_id, self.investor1), 0)

        self.buy_fiat(self.investor1, 1)
        self.assertEqual(self.view(self.crowdsale_id, "current_round"), 1)
        self.assertEqual(self._vault_balance(self.private_vault_id, self.investor1), CAP_0)
        self.assertEqual(self._vault_balance(self.presale_vault_id, self.investor1), 1)
        self.assertEqual(self.view(self.crowdsale_id, "minted_by_crowdsale"), CAP_0 + 1)

    def test_buy_tokens_over_hard_cap_fails(self):
        self.deploy_sale()
        self.start_sale(self.investor1)
        self.buy_fiat(self.investor1, HARD_CAP - 100)
        self.assertEqual(self.view(self.crowdsale_id, "current_round"), 2)

        with self.assertRaises(HardCapExceeded):
            self._buy(self.investor1, 1000)
        self.assertEqual(self.view(self.crowdsale_id, "minted_by_crowdsale"), HARD_CAP - 100)
        self.assertEqual(self.runner.get_balance(self.crowdsale_id, NATIVE), 0)

    def test_non_eth_purchase_up_to_hard_cap(self):
        self.deploy_sale()
        self.start_sale(self.investor1)

        self.buy_fiat(self.investor1, HARD_CAP)

        self.assertEqual(self.view(self.crowdsale_id, "current_round"), 3)
        self.assertEqual(self.view(self.crowdsale_id, "current_round_cap"), HARD_CAP)
        self.assertTrue(self.view(self.crowdsale_id, "hard_cap_reached"))
        self.assertTrue(self.view(self.crowdsale_id, "current_round_cap_reached"))
        self.assertEqual(self._vault_balance(self.private_vault_id, self.investor1), CAP_0)
        self.assertEqual(self._vault_balance(self.presale_vault_id, self.investor1), CAP_1 - CAP_0)
        self.assertEqual(self.token_balance(self.investor1), HARD_CAP - CAP_1)
        self.assertEqual(self.view(self.token_id, "total_supply"), settings.TOTAL_SUPPLY_CAP)

        rounds_started = [event.data for event in self.get_events(self.crowdsale_id, "RoundStarted")]
        self.assertEqual(rounds_started, [{"round_number": 1}, {"round_number": 2}])
        event = self.get_events(self.crowdsale_id, "NonEthTokenPurchased")[-1]
        self.assertEqual(event.data, {"beneficiary": self.investor1, "token_amount": HARD_CAP})

        self.assertEqual(self.view(self.private_vault_id, "release_time"),
                         self.now + settings.PRIVATE_VAULT_LOCK_PERIOD)
        self.assertEqual(self.view(self.presale_vault_id, "release_time"),
                         self.now + settings.PRESALE_VAULT_LOCK_PERIOD)
        self.assertEqual(self.view(self.reserve_vault_id, "release_time"),
                         self.now + settings.RESERVE_VAULT_LOCK_PERIOD)

        with self.assertRaises(SaleNotActive):
            self.buy_fiat(self.investor1, 1)

    def test_non_eth_purchase_over_hard_cap_fails(self):
        self.deploy_sale()
        self.start_sale(self.investor1)
        with self.assertRaises(HardCapExceeded):
            self.buy_fiat(self.investor1, HARD_CAP + 1)
        self.assertEqual(self.view(self.crowdsale_id, "minted_by_crowdsale"), 0)

    def test_non_eth_purchases(self):
        self.deploy_sale()
        self.start_sale(self.investor1, self.investor2)

        self.call(self.crowdsale_id, "non_eth_purchases", self.owner,
                  [self.investor1, self.investor2], [Amount(10), Amount(20)])
        self.assertEqual(self._vault_balance(self.private_vault_id, self.investor1), 10)
        self.assertEqual(self._vault_balance(self.private_vault_id, self.investor2), 20)

        with self.assertRaises(InvalidInput):
            self.call(self.crowdsale_id, "non_eth_purchases", self.owner, [self.investor1], [Amount(1), Amount(2)])

        investors = [self.investor1] * settings.BATCH_LIMIT
        amounts = [Amount(1)] * settings.BATCH_LIMIT
        with self.assertRaises(InvalidInput):
            self.call(self.crowdsale_id, "non_eth_purchases", self.owner, investors, amounts)
        self.assertEqual(self.view(self.crowdsale_id, "minted_by_crowdsale"), 30)

    def test_close_current_round(self):
        self.deploy_sale()
        self.call(self.crowdsale_id, "add_whitelisted", self.owner, self.investor1)
        with self.assertRaises(SaleNotActive):
            self.call(self.crowdsale_id, "close_current_round", self.owner)

        self.start_sale()
        self.buy_fiat(self.investor1, 5 * ONE_TOKEN)
        with self.assertRaises(Unauthorized):
            self.call(self.crowdsale_id, "close_current_round", self.investor1)

        self.call(self.crowdsale_id, "close_current_round", self.owner)
        self.assertEqual(self.view(self.crowdsale_id, "current_round"), 1)
        self.assertEqual(self.view(self.crowdsale_id, "cap_of_round", 0), 5 * ONE_TOKEN)
        self.assertEqual(self.get_events(self.crowdsale_id, "RoundStarted")[-1].data, {"round_number": 1})
        self.assertTrue(self.view(self.private_vault_id, "known_release_time"))

        self.buy_fiat(self.investor1, 7 * ONE_TOKEN)
        self.assertEqual(self._vault_balance(self.presale_vault_id, self.investor1), 7 * ONE_TOKEN)

        self.call(self.crowdsale_id, "close_current_round", self.owner)
        self.assertEqual(self.view(self.crowdsale_id, "current_round"), 2)
        cap_0 = self.view(self.crowdsale_id, "cap_of_round", 0)
        cap_1 = self.view(self.crowdsale_id, "cap_of_round", 1)
        self.assertEqual(self.view(self.presale_vault_id, "total_balance"), cap_1 - cap_0)

        with self.assertRaises(StateViolation):
            self.call(self.crowdsale_id, "close_current_round", self.owner)

        self.buy_fiat(self.investor1, ONE_TOKEN)
        self.assertEqual(self.token_balance(self.investor1), ONE_TOKEN)

    def test_close_round_after_hard_cap_fails(self):
        self.deploy_sale()
        self.start_sale(self.investor1)
        self.buy_fiat(self.investor1, HARD_CAP)
        with self.assertRaises(SaleNotActive):
            self.call(self.crowdsale_id, "close_current_round", self.owner)

    def test_update_rate(self):
        self.deploy_sale()
        self.call(self.crowdsale_id, "update_rate", self.owner, 11024)

        self.assertEqual(self.view(self.crowdsale_id, "rate"), 343)
        self.assertEqual(self.view(self.crowdsale_id, "fiat_rate"), 11024)
        self.assertEqual(self.get_events(self.crowdsale_id, "UpdatedFiatRate")[-1].data, {"value": 11024})

        with self.assertRaises(InvalidInput):
            self.call(self.crowdsale_id, "update_rate", self.owner, 0)
        with self.assertRaises(Unauthorized):
            self.call(self.crowdsale_id, "update_rate", self.investor1, 12000)

    def test_finalize(self):
        self.deploy_sale()
        self.start_sale(self.investor1)
        with self.assertRaises(StateViolation):
            self.call(self.crowdsale_id, "finalize", self.owner)

        self.buy_fiat(self.investor1, HARD_CAP)
        with self.assertRaises(Unauthorized):
            self.call(self.crowdsale_id, "finalize", self.investor1)
        self.call(self.crowdsale_id, "finalize", self.owner)

        self.assertTrue(self.view(self.crowdsale_id, "finalized"))
        self.assertEqual(self.get_events(self.crowdsale_id, "Finalized")[-1].data, {"account": self.owner})
        # The token is left as it was.
        self.assertTrue(self.view(self.token_id, "paused"))

        with self.assertRaises(StateViolation):
            self.call(self.crowdsale_id, "finalize", self.owner)

    def test_whitelist(self):
        self.deploy_sale()
        self.call(self.crowdsale_id, "add_whitelisted", self.owner, self.investor1)
        self.assertTrue(self.view(self.crowdsale_id, "is_whitelisted", self.investor1))
        with self.assertRaises(InvalidInput):
            self.call(self.crowdsale_id, "add_whitelisted", self.owner, self.investor1)
        with self.assertRaises(InvalidInput):
            self.call(self.crowdsale_id, "add_whitelisted", self.owner, NULL_ADDRESS)
        with self.assertRaises(Unauthorized):
            self.call(self.crowdsale_id, "add_whitelisted", self.investor1, self.investor2)

        self.call(self.crowdsale_id, "add_whitelisteds", self.owner, [self.investor2, self.investor3])
        self.call(self.crowdsale_id, "remove_whitelisteds", self.owner, [self.investor2, self.investor3])
        self.call(self.crowdsale_id, "remove_whitelisted", self.owner, self.investor1)
        self.assertFalse(self.view(self.crowdsale_id, "is_whitelisted", self.investor1))
        with self.assertRaises(InvalidInput):
            self.call(self.crowdsale_id, "remove_whitelisted", self.owner, self.investor1)

        self.assertEqual(len(self.get_events(self.crowdsale_id, "AddedWhitelisted")), 3)
        self.assertEqual(len(self.get_events(self.crowdsale_id, "RemovedWhitelisted")), 3)

        too_many = [self.gen_random_address() for _ in range(settings.BATCH_LIMIT)]
        with self.assertRaises(InvalidInput):
            self.call(self.crowdsale_id, "add_whitelisteds", self.owner, too_many)
        self.call(self.crowdsale_id, "add_whitelisteds", self.owner, too_many[1:])

    def test_pause(self):
        self.deploy_sale()
        self.start_sale(self.investor1)
        with self.assertRaises(Unauthorized):
            self.call(self.crowdsale_id, "pause", self.investor1)

        self.call(self.crowdsale_id, "pause", self.owner)
        self.assertTrue(self.view(self.crowdsale_id, "paused"))
        with self.assertRaises(SaleNotActive):
            self.buy_fiat(self.investor1, ONE_TOKEN)

        self.call(self.crowdsale_id, "unpause", self.owner)
        self.buy_fiat(self.investor1, ONE_TOKEN)
        self.assertEqual(self.get_events(self.crowdsale_id, "BePaused")[-1].data, {"manager": self.owner})
        self.assertEqual(self.get_events(self.crowdsale_id, "BeUnpaused")[-1].data, {"manager": self.owner})

        with self.assertRaises(StateViolation):
            self.call(self.crowdsale_id, "unpause", self.owner)

    def test_unpause_requires_minter_role(self):
        self.deploy_sale(setup_roles=False)
        self.call(self.crowdsale_id, "pause", self.deployer)
        with self.assertRaises(StateViolation):
            self.call(self.crowdsale_id, "unpause", self.deployer)

        self.setup_token_roles()
        self.call(self.crowdsale_id, "unpause", self.deployer)
        self.assertFalse(self.view(self.crowdsale_id, "paused"))

    def test_withdraw_funds(self):
        self.deploy_sale()
        self.start_sale(self.investor1)
        self._buy(self.investor1, 5000)

        withdrawal = [NCWithdrawalAction(token_uid=NATIVE, amount=3000)]
        with self.assertRaises(Unauthorized):
            self.call(self.crowdsale_id, "withdraw_funds", self.owner, actions=withdrawal)
        self.call(self.crowdsale_id, "withdraw_funds", self.wallet, actions=withdrawal)

        self.assertEqual(self.runner.get_balance(self.crowdsale_id, NATIVE), 2000)
        self.assertEqual(self.get_events(self.crowdsale_id, "FundsWithdrawn")[-1].data,
                         {"wallet": self.wallet, "value": 3000})
        with self.assertRaises(NCFail):
            self.call(self.crowdsale_id, "withdraw_funds", self.wallet,
                      actions=[NCWithdrawalAction(token_uid=NATIVE, amount=2001)])

    def test_managers(self):
        self.deploy_sale()
        self.call(self.crowdsale_id, "add_managers", self.owner, [self.investor1, self.investor2])
        self.assertEqual(self.view(self.crowdsale_id, "num_managers"), 3)
        with self.assertRaises(InvalidInput):
            self.call(self.crowdsale_id, "add_manager", self.owner, self.investor1)

        with self.assertRaises(Unauthorized):
            self.call(self.crowdsale_id, "remove_manager", self.investor1, self.investor2)
        with self.assertRaises(InvalidInput):
            self.call(self.crowdsale_id, "remove_manager", self.owner, self.investor3)
        self.call(self.crowdsale_id, "remove_manager", self.owner, self.investor2)
        self.call(self.crowdsale_id, "renounce_manager", self.investor1)
        self.assertEqual(self.view(self.crowdsale_id, "num_managers"), 1)

        with self.assertRaises(StateViolation):
            self.call(self.crowdsale_id, "renounce_manager", self.owner)
        with self.assertRaises(StateViolation):
            self.call(self.crowdsale_id, "renounce_ownership", self.owner)

        self.call(self.crowdsale_id, "transfer_ownership", self.owner, self.investor3)
        self.assertTrue(self.view(self.crowdsale_id, "is_owner", self.investor3))

    def test_get_sale_info(self):
        self.deploy_sale()
        self.start_sale(self.investor1)
        self.buy_fiat(self.investor1, ONE_TOKEN)
        self.advance_time(DAY_IN_SECONDS)

        info = self.view(self.crowdsale_id, "get_sale_info")
        self.assertIsInstance(info, CrowdsaleSaleInfo)
        self.assertEqual(info.token, self.token_id.hex())
        self.assertEqual(info.wallet, self.wallet.hex())
        self.assertEqual(info.minted_by_crowdsale, ONE_TOKEN)
        self.assertEqual(info.current_round, 0)
        self.assertEqual(info.current_round_cap, CAP_0)
        self.assertEqual(info.hard_cap, HARD_CAP)
        self.assertEqual(info.managers, 1)
        self.assertFalse(info.paused)
