import importlib

mod = "tsforge"
class LazyLoader:
    """
    Lazy loader for the tsforge functions to speed up startup time.
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item in self._mappings:
            module_name, func_name = self._mappings[item]
            module = self._load_module(module_name)
            return getattr(module, func_name)
        else:
            return self._load_module(f"{mod}.{item}")

# Define the public names and their corresponding module paths
_mappings = {
    "convert_schema_to_typescript": (f"{mod}.schematots", "convert_schema_to_typescript"),
    "convert_schema_dict_to_typescript": (f"{mod}.schematots", "convert_schema_dict_to_typescript"),
    "generate_typescript": (f"{mod}.schematots", "generate_typescript"),
    "SchemaToTypeScript": (f"{mod}.schematots", "SchemaToTypeScript"),
    "TypeSchema": (f"{mod}.schema", "TypeSchema"),
    "DescriptorRegistry": (f"{mod}.registry", "DescriptorRegistry"),
    "FileGroup": (f"{mod}.file_group", "FileGroup"),
    "TypeScriptWriter": (f"{mod}.tswriter", "TypeScriptWriter"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)
