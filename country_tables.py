"""
Country Reference Tables
Static per-country data used by the country economic service:
ISO 3166 registry (alpha-2 -> alpha-3, name, currency), corporate income tax
rates (2023) and central bank base rates (Q3 2024).

Lookups are plain dict accesses keyed by ISO alpha-3 code.
"""

from typing import Dict, Optional, Tuple


# ==================== COUNTRY REGISTRY ====================

# alpha-2: (alpha-3, display name, ISO 4217 currency)
COUNTRIES: Dict[str, Tuple[str, str, str]] = {
    "AD": ("AND", "Andorra", "EUR"),
    "AE": ("ARE", "United Arab Emirates", "AED"),
    "AF": ("AFG", "Afghanistan", "AFN"),
    "AG": ("ATG", "Antigua and Barbuda", "XCD"),
    "AL": ("ALB", "Albania", "ALL"),
    "AM": ("ARM", "Armenia", "AMD"),
    "AO": ("AGO", "Angola", "AOA"),
    "AR": ("ARG", "Argentina", "ARS"),
    "AT": ("AUT", "Austria", "EUR"),
    "AU": ("AUS", "Australia", "AUD"),
    "AZ": ("AZE", "Azerbaijan", "AZN"),
    "BA": ("BIH", "Bosnia and Herzegovina", "BAM"),
    "BB": ("BRB", "Barbados", "BBD"),
    "BD": ("BGD", "Bangladesh", "BDT"),
    "BE": ("BEL", "Belgium", "EUR"),
    "BF": ("BFA", "Burkina Faso", "XOF"),
    "BG": ("BGR", "Bulgaria", "BGN"),
    "BH": ("BHR", "Bahrain", "BHD"),
    "BI": ("BDI", "Burundi", "BIF"),
    "BJ": ("BEN", "Benin", "XOF"),
    "BN": ("BRN", "Brunei Darussalam", "BND"),
    "BO": ("BOL", "Bolivia", "BOB"),
    "BR": ("BRA", "Brazil", "BRL"),
    "BS": ("BHS", "Bahamas", "BSD"),
    "BT": ("BTN", "Bhutan", "BTN"),
    "BW": ("BWA", "Botswana", "BWP"),
    "BY": ("BLR", "Belarus", "BYN"),
    "BZ": ("BLZ", "Belize", "BZD"),
    "CA": ("CAN", "Canada", "CAD"),
    "CD": ("COD", "Democratic Republic of the Congo", "CDF"),
    "CF": ("CAF", "Central African Republic", "XAF"),
    "CG": ("COG", "Congo", "XAF"),
    "CH": ("CHE", "Switzerland", "CHF"),
    "CI": ("CIV", "Cote d'Ivoire", "XOF"),
    "CL": ("CHL", "Chile", "CLP"),
    "CM": ("CMR", "Cameroon", "XAF"),
    "CN": ("CHN", "China", "CNY"),
    "CO": ("COL", "Colombia", "COP"),
    "CR": ("CRI", "Costa Rica", "CRC"),
    "CU": ("CUB", "Cuba", "CUP"),
    "CV": ("CPV", "Cabo Verde", "CVE"),
    "CY": ("CYP", "Cyprus", "EUR"),
    "CZ": ("CZE", "Czechia", "CZK"),
    "DE": ("DEU", "Germany", "EUR"),
    "DJ": ("DJI", "Djibouti", "DJF"),
    "DK": ("DNK", "Denmark", "DKK"),
    "DM": ("DMA", "Dominica", "XCD"),
    "DO": ("DOM", "Dominican Republic", "DOP"),
    "DZ": ("DZA", "Algeria", "DZD"),
    "EC": ("ECU", "Ecuador", "USD"),
    "EE": ("EST", "Estonia", "EUR"),
    "EG": ("EGY", "Egypt", "EGP"),
    "ER": ("ERI", "Eritrea", "ERN"),
    "ES": ("ESP", "Spain", "EUR"),
    "ET": ("ETH", "Ethiopia", "ETB"),
    "FI": ("FIN", "Finland", "EUR"),
    "FJ": ("FJI", "Fiji", "FJD"),
    "FR": ("FRA", "France", "EUR"),
    "GA": ("GAB", "Gabon", "XAF"),
    "GB": ("GBR", "United Kingdom", "GBP"),
    "GD": ("GRD", "Grenada", "XCD"),
    "GE": ("GEO", "Georgia", "GEL"),
    "GH": ("GHA", "Ghana", "GHS"),
    "GM": ("GMB", "Gambia", "GMD"),
    "GN": ("GIN", "Guinea", "GNF"),
    "GQ": ("GNQ", "Equatorial Guinea", "XAF"),
    "GR": ("GRC", "Greece", "EUR"),
    "GT": ("GTM", "Guatemala", "GTQ"),
    "GW": ("GNB", "Guinea-Bissau", "XOF"),
    "GY": ("GUY", "Guyana", "GYD"),
    "HK": ("HKG", "Hong Kong", "HKD"),
    "HN": ("HND", "Honduras", "HNL"),
    "HR": ("HRV", "Croatia", "EUR"),
    "HT": ("HTI", "Haiti", "HTG"),
    "HU": ("HUN", "Hungary", "HUF"),
    "ID": ("IDN", "Indonesia", "IDR"),
    "IE": ("IRL", "Ireland", "EUR"),
    "IL": ("ISR", "Israel", "ILS"),
    "IN": ("IND", "India", "INR"),
    "IQ": ("IRQ", "Iraq", "IQD"),
    "IR": ("IRN", "Iran", "IRR"),
    "IS": ("ISL", "Iceland", "ISK"),
    "IT": ("ITA", "Italy", "EUR"),
    "JM": ("JAM", "Jamaica", "JMD"),
    "JO": ("JOR", "Jordan", "JOD"),
    "JP": ("JPN", "Japan", "JPY"),
    "KE": ("KEN", "Kenya", "KES"),
    "KG": ("KGZ", "Kyrgyzstan", "KGS"),
    "KH": ("KHM", "Cambodia", "KHR"),
    "KN": ("KNA", "Saint Kitts and Nevis", "XCD"),
    "KR": ("KOR", "Republic of Korea", "KRW"),
    "KW": ("KWT", "Kuwait", "KWD"),
    "KZ": ("KAZ", "Kazakhstan", "KZT"),
    "LA": ("LAO", "Lao People's Democratic Republic", "LAK"),
    "LB": ("LBN", "Lebanon", "LBP"),
    "LC": ("LCA", "Saint Lucia", "XCD"),
    "LI": ("LIE", "Liechtenstein", "CHF"),
    "LK": ("LKA", "Sri Lanka", "LKR"),
    "LR": ("LBR", "Liberia", "LRD"),
    "LS": ("LSO", "Lesotho", "LSL"),
    "LT": ("LTU", "Lithuania", "EUR"),
    "LU": ("LUX", "Luxembourg", "EUR"),
    "LV": ("LVA", "Latvia", "EUR"),
    "LY": ("LBY", "Libya", "LYD"),
    "MA": ("MAR", "Morocco", "MAD"),
    "MC": ("MCO", "Monaco", "EUR"),
    "MD": ("MDA", "Republic of Moldova", "MDL"),
    "MG": ("MDG", "Madagascar", "MGA"),
    "MK": ("MKD", "North Macedonia", "MKD"),
    "ML": ("MLI", "Mali", "XOF"),
    "MM": ("MMR", "Myanmar", "MMK"),
    "MN": ("MNG", "Mongolia", "MNT"),
    "MO": ("MAC", "Macao", "MOP"),
    "MR": ("MRT", "Mauritania", "MRU"),
    "MT": ("MLT", "Malta", "EUR"),
    "MU": ("MUS", "Mauritius", "MUR"),
    "MV": ("MDV", "Maldives", "MVR"),
    "MW": ("MWI", "Malawi", "MWK"),
    "MX": ("MEX", "Mexico", "MXN"),
    "MY": ("MYS", "Malaysia", "MYR"),
    "MZ": ("MOZ", "Mozambique", "MZN"),
    "NA": ("NAM", "Namibia", "NAD"),
    "NE": ("NER", "Niger", "XOF"),
    "NG": ("NGA", "Nigeria", "NGN"),
    "NI": ("NIC", "Nicaragua", "NIO"),
    "NL": ("NLD", "Netherlands", "EUR"),
    "NO": ("NOR", "Norway", "NOK"),
    "NP": ("NPL", "Nepal", "NPR"),
    "NZ": ("NZL", "New Zealand", "NZD"),
    "OM": ("OMN", "Oman", "OMR"),
    "PA": ("PAN", "Panama", "PAB"),
    "PE": ("PER", "Peru", "PEN"),
    "PG": ("PNG", "Papua New Guinea", "PGK"),
    "PH": ("PHL", "Philippines", "PHP"),
    "PK": ("PAK", "Pakistan", "PKR"),
    "PL": ("POL", "Poland", "PLN"),
    "PR": ("PRI", "Puerto Rico", "USD"),
    "PT": ("PRT", "Portugal", "EUR"),
    "PY": ("PRY", "Paraguay", "PYG"),
    "QA": ("QAT", "Qatar", "QAR"),
    "RO": ("ROU", "Romania", "RON"),
    "RS": ("SRB", "Serbia", "RSD"),
    "RU": ("RUS", "Russian Federation", "RUB"),
    "RW": ("RWA", "Rwanda", "RWF"),
    "SA": ("SAU", "Saudi Arabia", "SAR"),
    "SB": ("SLB", "Solomon Islands", "SBD"),
    "SC": ("SYC", "Seychelles", "SCR"),
    "SD": ("SDN", "Sudan", "SDG"),
    "SE": ("SWE", "Sweden", "SEK"),
    "SG": ("SGP", "Singapore", "SGD"),
    "SI": ("SVN", "Slovenia", "EUR"),
    "SK": ("SVK", "Slovakia", "EUR"),
    "SL": ("SLE", "Sierra Leone", "SLE"),
    "SM": ("SMR", "San Marino", "EUR"),
    "SN": ("SEN", "Senegal", "XOF"),
    "SR": ("SUR", "Suriname", "SRD"),
    "ST": ("STP", "Sao Tome and Principe", "STN"),
    "SV": ("SLV", "El Salvador", "USD"),
    "SY": ("SYR", "Syrian Arab Republic", "SYP"),
    "SZ": ("SWZ", "Eswatini", "SZL"),
    "TD": ("TCD", "Chad", "XAF"),
    "TG": ("TGO", "Togo", "XOF"),
    "TH": ("THA", "Thailand", "THB"),
    "TJ": ("TJK", "Tajikistan", "TJS"),
    "TM": ("TKM", "Turkmenistan", "TMT"),
    "TN": ("TUN", "Tunisia", "TND"),
    "TO": ("TON", "Tonga", "TOP"),
    "TR": ("TUR", "Turkey", "TRY"),
    "TT": ("TTO", "Trinidad and Tobago", "TTD"),
    "TW": ("TWN", "Taiwan", "TWD"),
    "TZ": ("TZA", "United Republic of Tanzania", "TZS"),
    "UA": ("UKR", "Ukraine", "UAH"),
    "UG": ("UGA", "Uganda", "UGX"),
    "US": ("USA", "United States of America", "USD"),
    "UY": ("URY", "Uruguay", "UYU"),
    "UZ": ("UZB", "Uzbekistan", "UZS"),
    "VC": ("VCT", "Saint Vincent and the Grenadines", "XCD"),
    "VE": ("VEN", "Venezuela", "VES"),
    "VN": ("VNM", "Viet Nam", "VND"),
    "VU": ("VUT", "Vanuatu", "VUV"),
    "WS": ("WSM", "Samoa", "WST"),
    "YE": ("YEM", "Yemen", "YER"),
    "ZA": ("ZAF", "South Africa", "ZAR"),
    "ZM": ("ZMB", "Zambia", "ZMW"),
    "ZW": ("ZWE", "Zimbabwe", "ZWL"),
}


# ==================== CORPORATE TAX (2023, percent) ====================

CORPORATE_TAX_RATES: Dict[str, float] = {
    "AFG": 20.0, "AGO": 25.0, "ALB": 15.0, "ARE": 9.0, "ARG": 35.0,
    "ARM": 18.0, "ATG": 25.0, "AUS": 30.0, "AUT": 24.0, "AZE": 20.0,
    "BDI": 30.0, "BEL": 25.0, "BEN": 30.0, "BFA": 27.5, "BGD": 27.5,
    "BGR": 10.0, "BHR": 0.0, "BHS": 0.0, "BIH": 10.0, "BLR": 20.0,
    "BLZ": 0.0, "BOL": 25.0, "BRA": 34.0, "BRB": 5.5, "BRN": 18.5,
    "BTN": 25.0, "BWA": 22.0, "CAF": 30.0, "CAN": 26.21, "CHE": 19.653,
    "CHL": 27.0, "CHN": 25.0, "CIV": 25.0, "CMR": 33.0, "COD": 30.0,
    "COG": 28.0, "COL": 35.0, "CPV": 22.44, "CRI": 30.0, "CUB": 35.0,
    "CYP": 12.5, "CZE": 19.0, "DEU": 29.941, "DJI": 25.0, "DMA": 25.0,
    "DNK": 22.0, "DOM": 27.0, "DZA": 26.0, "ECU": 25.0, "EGY": 22.5,
    "ERI": 30.0, "ESP": 25.0, "EST": 20.0, "ETH": 30.0, "FIN": 20.0,
    "FJI": 20.0, "FRA": 25.825, "GAB": 30.0, "GBR": 25.0, "GEO": 15.0,
    "GHA": 25.0, "GIN": 25.0, "GMB": 27.0, "GNB": 25.0, "GNQ": 35.0,
    "GRC": 22.0, "GRD": 28.0, "GTM": 25.0, "GUY": 25.0, "HKG": 16.5,
    "HND": 30.0, "HRV": 18.0, "HTI": 30.0, "HUN": 9.0, "IDN": 22.0,
    "IND": 30.0, "IRL": 12.5, "IRN": 25.0, "IRQ": 15.0, "ISL": 20.0,
    "ISR": 23.0, "ITA": 27.81, "JAM": 25.0, "JOR": 20.0, "JPN": 29.74,
    "KAZ": 20.0, "KEN": 30.0, "KGZ": 10.0, "KHM": 20.0, "KNA": 33.0,
    "KOR": 26.5, "KWT": 15.0, "LAO": 20.0, "LBN": 17.0, "LBR": 25.0,
    "LBY": 20.0, "LCA": 30.0, "LKA": 30.0, "LSO": 25.0, "LTU": 15.0,
    "LUX": 24.94, "LVA": 20.0, "MAC": 12.0, "MAR": 32.0, "MDA": 12.0,
    "MDG": 20.0, "MDV": 15.0, "MEX": 30.0, "MKD": 10.0, "MLI": 30.0,
    "MLT": 35.0, "MMR": 22.0, "MNG": 25.0, "MOZ": 32.0, "MRT": 25.0,
    "MUS": 15.0, "MWI": 30.0, "MYS": 24.0, "NAM": 32.0, "NER": 30.0,
    "NGA": 30.0, "NIC": 30.0, "NLD": 25.8, "NOR": 22.0, "NPL": 25.0,
    "NZL": 28.0, "OMN": 15.0, "PAK": 29.0, "PAN": 25.0, "PER": 29.5,
    "PHL": 25.0, "PNG": 30.0, "POL": 19.0, "PRI": 37.5, "PRT": 31.5,
    "PRY": 10.0, "QAT": 10.0, "ROU": 16.0, "RUS": 20.0, "RWA": 30.0,
    "SAU": 20.0, "SDN": 35.0, "SEN": 30.0, "SGP": 17.0, "SLB": 30.0,
    "SLE": 25.0, "SLV": 30.0, "SRB": 15.0, "STP": 25.0, "SUR": 36.0,
    "SVK": 21.0, "SVN": 19.0, "SWE": 20.6, "SWZ": 27.5, "SYC": 25.0,
    "SYR": 28.0, "TCD": 35.0, "TGO": 27.0, "THA": 20.0, "TJK": 18.0,
    "TKM": 8.0, "TON": 25.0, "TTO": 30.0, "TUN": 15.0, "TUR": 25.0,
    "TWN": 20.0, "TZA": 30.0, "UGA": 30.0, "UKR": 18.0, "URY": 25.0,
    "USA": 25.768, "UZB": 15.0, "VCT": 28.0, "VEN": 34.0, "VNM": 20.0,
    "VUT": 0.0, "WSM": 27.0, "YEM": 20.0, "ZAF": 27.0, "ZMB": 30.0,
    "ZWE": 24.72,
}

WORLD_AVERAGE_CORPORATE_TAX_RATE = 0.2345


# ==================== CENTRAL BANK BASE RATES (Q3 2024, percent) ====================

BASE_RATES: Dict[str, float] = {
    "CZE": 4.50, "DNK": 3.10, "DOM": 6.75, "EGY": 27.25, "SWZ": 7.50,
    "FJI": 0.25, "GMB": 17.00, "GEO": 8.00, "GHA": 29.00, "GTM": 5.00,
    "HND": 3.00, "HKG": 5.75, "HUN": 7.00, "ISL": 9.25, "IND": 6.50,
    "IDN": 6.25, "IRN": 23.00, "ISR": 4.50, "JPN": 0.25, "JOR": 7.50,
    "KAZ": 14.25, "KEN": 13.00, "KWT": 4.25, "KGZ": 9.00, "LBN": 20.00,
    "MWI": 26.00, "MYS": 3.00, "MEX": 10.75, "MDA": 3.60, "MNG": 11.00,
    "MAR": 2.75, "MOZ": 14.25, "NAM": 7.50, "NZL": 5.25, "NIC": 7.00,
    "NGA": 26.75, "MKD": 6.30, "NLD": 3.65, "ZAF": 8.25, "THA": 2.25,
    "TUR": 30.00, "UKR": 25.00, "GBR": 5.25, "USA": 5.50, "VEN": 58.12,
    "ZMB": 9.00, "ZWE": 150.00,
}

WORLD_AVERAGE_BASE_RATE = 0.1411

# Stand-in for an equity risk premium model: one global expected market return.
DEFAULT_MARKET_RETURN_RATE = 0.2493


# ==================== SAFE PICKERS ====================

def lookup_country(country_code: Optional[str]) -> Optional[Tuple[str, str, str]]:
    """
    Resolve an ISO alpha-2 code to its registry entry.

    Returns:
        (alpha-3, name, currency) or None when the code is unknown
    """
    if not country_code or len(country_code.strip()) != 2:
        return None
    return COUNTRIES.get(country_code.strip().upper())


def corporate_tax_rate(iso3_code: str) -> float:
    """Corporate income tax rate as decimal, world average when the country is not listed."""
    rate = CORPORATE_TAX_RATES.get(iso3_code)
    if rate is None:
        return WORLD_AVERAGE_CORPORATE_TAX_RATE
    return rate / 100.0


def base_rate(iso3_code: str) -> float:
    """Central bank base rate as decimal, world average when the country is not listed."""
    rate = BASE_RATES.get(iso3_code)
    if rate is None:
        return WORLD_AVERAGE_BASE_RATE
    return rate / 100.0


def market_return_rate(iso3_code: str) -> float:
    """Expected market return; no per-country source exists yet."""
    return DEFAULT_MARKET_RETURN_RATE
