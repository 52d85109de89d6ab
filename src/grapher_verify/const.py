ERRORS = {
  "E_LAYOUT_MISSING": "Required file or directory missing",
  "E_MANIFEST_JSON": "Manifest JSON invalid",
  "E_SIG_INVALID": "Manifest signature invalid",
  "E_INTEGRITY_MISMATCH": "Integrity root does not match manifest",
  "E_FUNCTION_MALFORMED": "Function file is not valid command text",
  "E_TAG_DANGLING": "Function tag references a function missing from the pack",
  "E_POLICY_TRUST": "Publisher key not trusted",
}
