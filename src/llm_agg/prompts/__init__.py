from .summary import BASE_PROMPT, SUBJECT_SUMMARY_PROMPT, NOT_ENOUGH_DATA
