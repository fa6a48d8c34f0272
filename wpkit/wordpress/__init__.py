"""WordPress operations driven through WP-CLI.

Submodules:
- cli: WP-CLI provisioning and command wrappers
- installer: straight-line site scaffolding
- site: site inspection and removal
- wp_config: wp-config.php parsing
"""
