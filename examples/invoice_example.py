"""Example usage of the pipeline on OCR'd invoice lines."""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from fluent_pipeline import (
    ExtractionConfig,
    FuzzyMode,
    SimilarityAlgorithm,
    SimilarityConfig,
    correct_typos,
    cross_validate,
    extract_date,
    extract_decimal,
    fuzzy_match_many
)


def create_configs():
    """
    Create the configurations used for invoice validation.

    Returns:
        dict: Named extraction and similarity configurations
    """
    return {
        # Amount is the first group after a currency sign
        'amount': ExtractionConfig(
            pattern=r'\$\s*([\d,]+\.\d{2})',
            group_index=1
        ),
        # OCR noise often produces impossible dates next to the real one
        'date': ExtractionConfig(
            use_default_pattern=True,
            fuzzy_mode=FuzzyMode.PRIMARY,
            similarity=SimilarityConfig(similarity_threshold=0.5),
            date_formats=['%Y-%m-%d', '%d/%m/%Y']
        ),
        'customer': SimilarityConfig(
            algorithm=SimilarityAlgorithm.JARO_WINKLER,
            similarity_threshold=0.85
        ),
        'address': SimilarityConfig(
            normalize_address=True,
            similarity_threshold=0.8
        )
    }


def validate_invoices(
    invoices: pd.DataFrame,
    customers: pd.DataFrame
) -> pd.DataFrame:
    """
    Extract amounts and dates from invoice text and check the customer
    against the customer master data.

    Args:
        invoices: Columns 'text', 'customer' and 'address'
        customers: Customer master data with 'Name' and 'Address' columns

    Returns:
        pd.DataFrame: One row per invoice with extracted values and scores
    """
    configs = create_configs()
    known_names = customers['Name'].tolist()
    rows = []

    for _, invoice in invoices.iterrows():
        amount = extract_decimal(invoice['text'], configs['amount'])
        date = extract_date(invoice['text'], configs['date'])

        name = correct_typos(invoice['customer'], known_names, configs['customer'])
        best = fuzzy_match_many(name, known_names, configs['customer'])
        best_match, best_score = best.value or (None, 0.0)

        address_score = None
        if best_match is not None:
            record = customers[customers['Name'] == best_match].iloc[0]
            check = cross_validate(
                invoice['address'], record, {'Address': 'Address'}, configs['address']
            )
            if check.value is not None:
                address_score = check.value.field_score('Address')

        errors = amount.errors + date.errors + best.errors
        rows.append({
            'amount': amount.value,
            'date': date.value,
            'customer': best_match,
            'customer_score': best_score,
            'address_score': address_score,
            'is_valid': amount.is_valid and date.is_valid and best.is_valid,
            'errors': '; '.join(str(e) for e in errors)
        })

    return pd.DataFrame(rows)


def run_example(output_file: Optional[Path] = None) -> pd.DataFrame:
    """
    Run the example on built-in sample data.

    Args:
        output_file: Optional path for a CSV copy of the results

    Returns:
        pd.DataFrame: Validation results
    """
    try:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(levelname)s - %(message)s'
        )

        customers = pd.DataFrame([
            {'Name': 'Acme Corporation', 'Address': '123 Main Street'},
            {'Name': 'Globex Industries', 'Address': '9 Elm Boulevard'},
        ])
        invoices = pd.DataFrame([
            {
                'text': 'Invoice 2024-13-45 / 2024-01-15 Total: $1,299.00',
                'customer': 'Acme Corporatoin',
                'address': '123 Main St.'
            },
            {
                'text': 'Invoice 15/02/2024 Total: $ 45.10',
                'customer': 'Globex Ind.',
                'address': '9 Elm Blvd'
            },
            {
                'text': 'Invoice (date illegible) Total: N/A',
                'customer': 'Initech',
                'address': '1 Office Park'
            },
        ])

        logging.info(f"Validating {len(invoices)} invoices")
        results = validate_invoices(invoices, customers)

        valid = results['is_valid'].sum()
        logging.info(f"Valid invoices: {valid} of {len(results)}")
        for _, row in results[~results['is_valid']].iterrows():
            logging.info(f"Rejected: {row['errors']}")

        if output_file:
            logging.info(f"Saving results to: {output_file}")
            results.to_csv(output_file, index=False)

        return results

    except Exception as e:
        logging.error(f"An error occurred: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    print(run_example().to_string())
