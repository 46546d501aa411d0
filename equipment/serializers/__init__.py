import bleach


def clean_text(v):
    """Strip markup from free text coming from the dashboards."""
    return bleach.clean((v or '').strip(), tags=set(), strip=True)
