"""
Standard chart of accounts and standard mapping rules.

Both initializers are idempotent: accounts are keyed by account_code and
rules by rule_name within a company.
"""

from typing import List, NamedTuple

from finledger.app.models.accounting_enums import AccountType, MatchType

# Rule precedence bands; lower value is evaluated first
PRIORITY_HIGHEST = 1
PRIORITY_CRITICAL = 10
PRIORITY_HIGH = 20
PRIORITY_STANDARD = 30
PRIORITY_GENERIC = 50
PRIORITY_FALLBACK = 90


class AccountTemplate(NamedTuple):
    code: str
    name: str
    account_type: AccountType
    category: str


class RuleTemplate(NamedTuple):
    name: str
    description: str
    match_type: MatchType
    match_value: str
    account_code: str
    priority: int


CURRENT_ASSETS = "Current Assets"
NON_CURRENT_ASSETS = "Non-Current Assets"
CURRENT_LIABILITIES = "Current Liabilities"
NON_CURRENT_LIABILITIES = "Non-Current Liabilities"
EQUITY = "Owner's Equity"
OPERATING_REVENUE = "Operating Revenue"
OTHER_INCOME = "Other Income"
OPERATING_EXPENSES = "Operating Expenses"
ADMINISTRATIVE_EXPENSES = "Administrative Expenses"
FINANCE_COSTS = "Finance Costs"


STANDARD_CHART: List[AccountTemplate] = [
    AccountTemplate("1000", "Petty Cash", AccountType.ASSET, CURRENT_ASSETS),
    AccountTemplate("1100", "Bank - Current Account", AccountType.ASSET, CURRENT_ASSETS),
    AccountTemplate("1101", "Bank - Savings Account", AccountType.ASSET, CURRENT_ASSETS),
    AccountTemplate("1102", "Bank - Foreign Currency", AccountType.ASSET, CURRENT_ASSETS),
    AccountTemplate("1200", "Accounts Receivable", AccountType.ASSET, CURRENT_ASSETS),
    AccountTemplate("1300", "Inventory", AccountType.ASSET, CURRENT_ASSETS),
    AccountTemplate("1400", "Prepaid Expenses", AccountType.ASSET, CURRENT_ASSETS),
    AccountTemplate("1500", "VAT Input", AccountType.ASSET, CURRENT_ASSETS),
    AccountTemplate("2000", "Property, Plant & Equipment", AccountType.ASSET, NON_CURRENT_ASSETS),
    AccountTemplate("2100", "Accumulated Depreciation", AccountType.ASSET, NON_CURRENT_ASSETS),
    AccountTemplate("2200", "Investments", AccountType.ASSET, NON_CURRENT_ASSETS),
    AccountTemplate("2300", "Motor Vehicles", AccountType.ASSET, NON_CURRENT_ASSETS),
    AccountTemplate("2400", "Furniture & Fixtures", AccountType.ASSET, NON_CURRENT_ASSETS),
    AccountTemplate("2500", "Office Equipment", AccountType.ASSET, NON_CURRENT_ASSETS),
    AccountTemplate("2600", "Computer Software", AccountType.ASSET, NON_CURRENT_ASSETS),
    AccountTemplate("3000", "Accounts Payable", AccountType.LIABILITY, CURRENT_LIABILITIES),
    AccountTemplate("3100", "VAT Output", AccountType.LIABILITY, CURRENT_LIABILITIES),
    AccountTemplate("3200", "PAYE Payable", AccountType.LIABILITY, CURRENT_LIABILITIES),
    AccountTemplate("3300", "UIF Payable", AccountType.LIABILITY, CURRENT_LIABILITIES),
    AccountTemplate("3400", "SDL Payable", AccountType.LIABILITY, CURRENT_LIABILITIES),
    AccountTemplate("3500", "Accrued Expenses", AccountType.LIABILITY, CURRENT_LIABILITIES),
    AccountTemplate("4000", "Long-term Loans", AccountType.LIABILITY, NON_CURRENT_LIABILITIES),
    AccountTemplate("5000", "Share Capital", AccountType.EQUITY, EQUITY),
    AccountTemplate("5100", "Retained Earnings", AccountType.EQUITY, EQUITY),
    AccountTemplate("5200", "Current Year Earnings", AccountType.EQUITY, EQUITY),
    AccountTemplate("5300", "Opening Balance Equity", AccountType.EQUITY, EQUITY),
    AccountTemplate("6000", "Sales Revenue", AccountType.REVENUE, OPERATING_REVENUE),
    AccountTemplate("6100", "Service Revenue", AccountType.REVENUE, OPERATING_REVENUE),
    AccountTemplate("6200", "Other Operating Revenue", AccountType.REVENUE, OPERATING_REVENUE),
    AccountTemplate("7000", "Interest Income", AccountType.REVENUE, OTHER_INCOME),
    AccountTemplate("7100", "Dividend Income", AccountType.REVENUE, OTHER_INCOME),
    AccountTemplate("7200", "Gain on Asset Disposal", AccountType.REVENUE, OTHER_INCOME),
    AccountTemplate("8000", "Cost of Goods Sold", AccountType.EXPENSE, OPERATING_EXPENSES),
    AccountTemplate("8100", "Employee Costs", AccountType.EXPENSE, OPERATING_EXPENSES),
    AccountTemplate("8200", "Rent Expense", AccountType.EXPENSE, OPERATING_EXPENSES),
    AccountTemplate("8300", "Utilities", AccountType.EXPENSE, OPERATING_EXPENSES),
    AccountTemplate("8400", "Communication", AccountType.EXPENSE, OPERATING_EXPENSES),
    AccountTemplate("8500", "Motor Vehicle Expenses", AccountType.EXPENSE, OPERATING_EXPENSES),
    AccountTemplate("8600", "Travel & Entertainment", AccountType.EXPENSE, OPERATING_EXPENSES),
    AccountTemplate("8700", "Professional Services", AccountType.EXPENSE, ADMINISTRATIVE_EXPENSES),
    AccountTemplate("8710", "Suppliers Expense", AccountType.EXPENSE, ADMINISTRATIVE_EXPENSES),
    AccountTemplate("8720", "HR Management Expense", AccountType.EXPENSE, ADMINISTRATIVE_EXPENSES),
    AccountTemplate("8730", "Education & Training", AccountType.EXPENSE, ADMINISTRATIVE_EXPENSES),
    AccountTemplate("8800", "Insurance", AccountType.EXPENSE, ADMINISTRATIVE_EXPENSES),
    AccountTemplate("8900", "Repairs & Maintenance", AccountType.EXPENSE, OPERATING_EXPENSES),
    AccountTemplate("9000", "Office Supplies", AccountType.EXPENSE, ADMINISTRATIVE_EXPENSES),
    AccountTemplate("9100", "Computer Expenses", AccountType.EXPENSE, ADMINISTRATIVE_EXPENSES),
    AccountTemplate("9200", "Marketing & Advertising", AccountType.EXPENSE, OPERATING_EXPENSES),
    AccountTemplate("9300", "Training & Development", AccountType.EXPENSE, ADMINISTRATIVE_EXPENSES),
    AccountTemplate("9400", "Depreciation", AccountType.EXPENSE, OPERATING_EXPENSES),
    AccountTemplate("9500", "Interest Expense", AccountType.EXPENSE, FINANCE_COSTS),
    AccountTemplate("9600", "Bank Charges", AccountType.EXPENSE, FINANCE_COSTS),
    AccountTemplate("9700", "Foreign Exchange Loss", AccountType.EXPENSE, FINANCE_COSTS),
    AccountTemplate("9800", "VAT Payments", AccountType.EXPENSE, ADMINISTRATIVE_EXPENSES),
    AccountTemplate("9810", "Loan Repayments", AccountType.EXPENSE, FINANCE_COSTS),
    AccountTemplate("9820", "PAYE Expense", AccountType.EXPENSE, ADMINISTRATIVE_EXPENSES),
    AccountTemplate("9900", "Pension Expenses", AccountType.EXPENSE, OPERATING_EXPENSES),
]


STANDARD_RULES: List[RuleTemplate] = [
    # Fees are checked before anything else: "FEE IMMEDIATE PAYMENT" must not
    # fall through to a salary or supplier payment rule.
    RuleTemplate("Bank Fees", "Bank fees on payments and transfers",
                 MatchType.STARTS_WITH, "FEE", "9600", PRIORITY_HIGHEST),
    RuleTemplate("Service Fees", "Monthly account service fees",
                 MatchType.CONTAINS, "SERVICE FEE", "9600", PRIORITY_HIGHEST),
    RuleTemplate("Bank Charges", "Generic bank charges",
                 MatchType.CONTAINS, "BANK CHARGE", "9600", PRIORITY_HIGHEST),

    RuleTemplate("Excess Interest", "Excess interest charged on the account",
                 MatchType.CONTAINS, "EXCESS INTEREST", "9500", PRIORITY_CRITICAL),
    RuleTemplate("Interest Received", "Credit interest earned on the account",
                 MatchType.REGEX, r"\b(CREDIT )?INTEREST (RECEIVED|EARNED|CAPITALISED)\b", "7000", PRIORITY_CRITICAL),
    RuleTemplate("SARS VAT", "VAT payments to the revenue service",
                 MatchType.REGEX, r"\bSARS\b.*\bVAT\b", "9800", PRIORITY_CRITICAL),
    RuleTemplate("SARS PAYE", "PAYE payments to the revenue service",
                 MatchType.REGEX, r"\bSARS\b.*\bPAYE\b", "9820", PRIORITY_CRITICAL),

    RuleTemplate("Salaries", "Salary and wage payments",
                 MatchType.REGEX, r"\b(SALARY|SALARIES|WAGES?)\b", "8100", PRIORITY_HIGH),
    RuleTemplate("Pension Fund", "Pension and provident fund contributions",
                 MatchType.REGEX, r"\b(PENSION|PROVIDENT)\b", "9900", PRIORITY_HIGH),
    RuleTemplate("Bond Repayment", "Bond and home loan repayments",
                 MatchType.CONTAINS, "BOND", "4000", PRIORITY_HIGH),
    RuleTemplate("Loan", "Loan advances and repayments",
                 MatchType.CONTAINS, "LOAN", "4000", PRIORITY_HIGH),

    RuleTemplate("Insurance", "Insurance premiums",
                 MatchType.REGEX, r"\b(INSURANCE|PREMIUM|ASSURANCE)\b", "8800", PRIORITY_STANDARD),
    RuleTemplate("Fuel", "Fuel purchases",
                 MatchType.REGEX, r"\b(FUEL|PETROL|DIESEL|ENGEN|SHELL|SASOL|CALTEX)\b", "8500", PRIORITY_STANDARD),
    RuleTemplate("Vehicle Tracking", "Vehicle tracking subscriptions",
                 MatchType.REGEX, r"\b(TRACKER|CARTRACK|NETSTAR)\b", "8500", PRIORITY_STANDARD),
    RuleTemplate("Telephone & Data", "Telephone, cellphone and data costs",
                 MatchType.REGEX, r"\b(TELKOM|VODACOM|MTN|CELL C|AIRTIME|DATA BUNDLE)\b", "8400", PRIORITY_STANDARD),
    RuleTemplate("Rent", "Office and premises rent",
                 MatchType.REGEX, r"\bRENT(AL)?\b", "8200", PRIORITY_STANDARD),
    RuleTemplate("Utilities", "Electricity and water",
                 MatchType.REGEX, r"\b(ELECTRICITY|ESKOM|WATER|MUNICIPAL)\b", "8300", PRIORITY_STANDARD),
    RuleTemplate("Education", "School, college and university fees",
                 MatchType.REGEX, r"\b(COLLEGE|SCHOOL|UNIVERSITY)\b", "9300", PRIORITY_STANDARD),
    RuleTemplate("Professional Services", "Accounting, legal and consulting fees",
                 MatchType.REGEX, r"\b(ATTORNEY|ACCOUNTANT|AUDIT|CONSULTING|LEGAL)\b", "8700", PRIORITY_STANDARD),
    RuleTemplate("Software Subscriptions", "Software and cloud subscriptions",
                 MatchType.REGEX, r"\b(MICROSOFT|GOOGLE|ADOBE|AWS|SOFTWARE)\b", "9100", PRIORITY_STANDARD),
    RuleTemplate("Advertising", "Marketing and advertising spend",
                 MatchType.REGEX, r"\b(ADVERTISING|MARKETING|FACEBOOK ADS)\b", "9200", PRIORITY_STANDARD),

    RuleTemplate("Customer Deposits", "Deposits and credit transfers from customers",
                 MatchType.REGEX, r"\b(CREDIT TRANSFER|DEPOSIT)\b", "6100", PRIORITY_GENERIC),
    RuleTemplate("Stationery", "Stationery and office supplies",
                 MatchType.REGEX, r"\b(STATIONERY|OFFICE SUPPLIES)\b", "9000", PRIORITY_GENERIC),
    RuleTemplate("Repairs", "Repairs and maintenance",
                 MatchType.REGEX, r"\b(REPAIRS?|MAINTENANCE)\b", "8900", PRIORITY_GENERIC),

    RuleTemplate("Supplier Payments", "Payments to suppliers not matched above",
                 MatchType.CONTAINS, "PAYMENT TO", "8710", PRIORITY_FALLBACK),
    RuleTemplate("Cash Withdrawals", "ATM and counter cash withdrawals",
                 MatchType.REGEX, r"\b(CASH WITHDRAWAL|ATM)\b", "1000", PRIORITY_FALLBACK),
]
