"""Sample records served by the in-memory backend in demo mode."""

DEMO_BILLS = [
    {
        "id": 1,
        "name": "Aluguel",
        "description": "Aluguel mensal do apartamento",
        "executionDate": "2025-01-05",
        "totalAmount": 2500.00,
        "numberOfInstallments": 12,
        "isPaid": False,
    },
    {
        "id": 2,
        "name": "Notebook Dell",
        "description": "Notebook para trabalho remoto",
        "executionDate": "2024-12-15",
        "totalAmount": 4800.00,
        "numberOfInstallments": 12,
        "isPaid": False,
    },
    {
        "id": 3,
        "name": "Academia",
        "description": "Mensalidade Smart Fit",
        "executionDate": "2025-01-10",
        "totalAmount": 99.90,
        "numberOfInstallments": 1,
        "isPaid": False,
    },
    {
        "id": 4,
        "name": "Curso de React",
        "description": "Udemy - React Avançado",
        "executionDate": "2024-11-20",
        "totalAmount": 599.90,
        "numberOfInstallments": 6,
        "isPaid": False,
    },
    {
        "id": 5,
        "name": "Seguro Saúde",
        "description": "Plano de saúde Unimed",
        "executionDate": "2025-01-15",
        "totalAmount": 650.00,
        "numberOfInstallments": 12,
        "isPaid": False,
    },
    {
        "id": 6,
        "name": "Netflix Premium",
        "description": "Assinatura mensal",
        "executionDate": "2025-01-08",
        "totalAmount": 55.90,
        "numberOfInstallments": 1,
        "isPaid": True,
    },
]

DEMO_CREDIT_CARDS = [
    {
        "id": 1,
        "name": "Nubank Ultravioleta",
        "creditLimit": 10000.00,
        "closingDay": 10,
        "dueDay": 17,
        "allowsPartialPayment": True,
    },
    {
        "id": 2,
        "name": "Inter Gold",
        "creditLimit": 5000.00,
        "closingDay": 5,
        "dueDay": 12,
        "allowsPartialPayment": True,
    },
    {
        "id": 3,
        "name": "C6 Bank Carbon",
        "creditLimit": 8000.00,
        "closingDay": 15,
        "dueDay": 22,
        "allowsPartialPayment": False,
    },
]

DEMO_INVOICES = [
    {"id": 1, "creditCardId": 1, "referenceMonth": "2025-01-01", "totalAmount": 3850.00,
     "previousBalance": 0, "closed": True, "paid": False},
    {"id": 2, "creditCardId": 1, "referenceMonth": "2024-12-01", "totalAmount": 2150.00,
     "previousBalance": 0, "closed": True, "paid": True},
    {"id": 3, "creditCardId": 2, "referenceMonth": "2025-01-01", "totalAmount": 1200.00,
     "previousBalance": 0, "closed": True, "paid": False},
    {"id": 4, "creditCardId": 3, "referenceMonth": "2025-01-01", "totalAmount": 980.00,
     "previousBalance": 0, "closed": False, "paid": False},
]
