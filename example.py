import os
from pathlib import Path

from oxr_bank import NoRateError, OpenExchangeRatesBank, SQLDocumentCache

print(OpenExchangeRatesBank.__version__)  # 0.4.0

# File cache, refreshed once a day
bank = OpenExchangeRatesBank(
    os.environ.get("OXR_APP_ID"),
    cache=Path("latest.json"),
    ttl_in_seconds=86400,
)
bank.save_rates()
bank.update_rates()
print(bank.get_rate("USD", "EUR"))
print(bank.get_rate("EUR", "JPY"))  # derived through USD
print(bank.rates_expiration)

# Bid/ask quotes (plan dependent)
bank.show_bid_ask = True
bank.update_rates()
try:
    print(bank.get_rate("USD", "EUR", rate_type="bid"))
except NoRateError as exc:
    print(exc)

# Historical rates kept in a database row
historical = OpenExchangeRatesBank(
    os.environ.get("OXR_APP_ID"),
    date="2015-05-05",
    cache=SQLDocumentCache("sqlite:///rates.db", cache_key="2015-05-05"),
)
historical.update_rates()
print(historical.get_rate("GBP", "EUR"))
