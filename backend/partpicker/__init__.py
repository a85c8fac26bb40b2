"""PartPicker: PC component price comparison for Bangladeshi retailers."""
