"""The snapd directory layout.

Every location snapd reads or writes is derived from the global root
directory, the resolved snap mount directory and a couple of facts about the
running system. ``build_snap_paths`` computes the complete table in one go;
the result is immutable and is replaced wholesale whenever the root changes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from snapdirs.path_utils import join
from snapdirs.release import ReleaseInfo

# Default libexecdir used on most distributions.
DEFAULT_DISTRO_LIBEXEC_DIR = "/usr/lib/snapd"
# Alternative libexecdir used on some distributions.
ALT_DISTRO_LIBEXEC_DIR = "/usr/libexec/snapd"

# Static inside the core snap. Never prefixed with the root directory, as they
# are always absolute once inside the snap confinement environment.
CORE_LIBEXEC_DIR = "/usr/lib/snapd"
CORE_SNAP_MOUNT_DIR = "/snap"

# Directory with snap data inside a user's home.
USER_HOME_SNAP_DIR = "snap"
# Experimental hidden directory for snap data inside a user's home.
HIDDEN_SNAP_DATA_HOME_DIR = ".snap/data"
# User-facing snap data after ~/snap has been migrated to ~/.snap.
EXPOSED_SNAP_HOME_DIR = "Snap"

# Prefix of blobs spooled by local installs into the blob dir, also used when
# cleaning them up.
LOCAL_INSTALL_BLOB_TEMP_PREFIX = ".local-install-"

# Relative on purpose, does not honor the root directory by itself.
SNAPPY_DIR = "var/lib/snapd"


def snapd_state_dir(root_dir: str) -> str:
    """Returns the path to /var/lib/snapd under ``root_dir``."""

    return join(root_dir, SNAPPY_DIR)


def snap_blob_dir_under(root_dir: str) -> str:
    return join(root_dir, SNAPPY_DIR, "snaps")


def snap_seed_dir_under(root_dir: str) -> str:
    return join(root_dir, SNAPPY_DIR, "seed")


def snap_state_file_under(root_dir: str) -> str:
    return join(root_dir, SNAPPY_DIR, "state.json")


def snap_state_lock_file_under(root_dir: str) -> str:
    return join(root_dir, SNAPPY_DIR, "state.lock")


def snap_modeenv_file_under(root_dir: str) -> str:
    return join(root_dir, SNAPPY_DIR, "modeenv")


def features_dir_under(root_dir: str) -> str:
    return join(root_dir, SNAPPY_DIR, "features")


def snap_system_params_under(root_dir: str) -> str:
    return join(root_dir, SNAPPY_DIR, "system-params")


def snap_systemd_conf_dir_under(root_dir: str) -> str:
    return join(root_dir, "/etc/systemd/system.conf.d")


def snap_services_dir_under(root_dir: str) -> str:
    """Returns the systemd system units dir under ``root_dir``."""

    return join(root_dir, "/etc/systemd/system")


def snap_runtime_services_dir_under(root_dir: str) -> str:
    return join(root_dir, "/run/systemd/system")


def snap_systemd_dir_under(root_dir: str) -> str:
    return join(root_dir, "/etc/systemd")


def snap_boot_assets_dir_under(root_dir: str) -> str:
    return join(root_dir, SNAPPY_DIR, "boot-assets")


def snap_device_dir_under(root_dir: str) -> str:
    return join(root_dir, SNAPPY_DIR, "device")


def snap_fde_dir_under(root_dir: str) -> str:
    """Returns the full disk encryption state dir under ``root_dir``."""

    return join(snap_device_dir_under(root_dir), "fde")


def snap_save_dir_under(root_dir: str) -> str:
    return join(root_dir, SNAPPY_DIR, "save")


def snap_fde_dir_under_save(save_dir: str) -> str:
    """Returns the full disk encryption state dir inside a save tree."""

    return join(save_dir, "device/fde")


def snap_repair_config_file_under(root_dir: str) -> str:
    return join(root_dir, SNAPPY_DIR, "repair.json")


def snap_kernel_drivers_trees_dir_under(root_dir: str) -> str:
    return join(root_dir, SNAPPY_DIR, "kernel")


def detect_distro_libexec_dir(root_dir: str) -> str:
    """Returns the distribution libexecdir under ``root_dir``.

    The default location wins unless it is missing and the alternative one
    exists.
    """

    default_dir = join(root_dir, DEFAULT_DISTRO_LIBEXEC_DIR)
    try:
        os.stat(default_dir)
    except FileNotFoundError:
        alt_dir = join(root_dir, ALT_DISTRO_LIBEXEC_DIR)
        if os.path.exists(alt_dir):
            return alt_dir
    except OSError:
        # present but not inspectable
        pass
    return default_dir


def fontconfig_cache_dirs(root_dir: str, *, release: ReleaseInfo) -> tuple[str, ...]:
    """Returns the system fontconfig cache dirs under ``root_dir``.

    /var/cache/fontconfig is right for Ubuntu, Debian, openSUSE and Arch.
    Fedora and CentOS moved the cache to /usr/lib/fontconfig/cache, but snaps
    may ship an older libfontconfig that still uses the old location, so both
    are needed there. Amazon Linux 2 is Fedora-like but kept the old location.
    """

    dirs = [join(root_dir, "/var/cache/fontconfig")]
    if release.distro_like("fedora") and not release.distro_like("amzn"):
        dirs.append(join(root_dir, "/usr/lib/fontconfig/cache"))
    return tuple(dirs)


@dataclass(frozen=True)
class SnapPaths:
    """Resolved snapd directory layout for one root directory."""

    global_root_dir: str
    snap_mount_dir: str
    distro_libexec_dir: str

    run_dir: str
    snap_run_dir: str
    snap_run_ns_dir: str
    snap_run_lock_dir: str
    snap_bootstrap_run_dir: str
    snap_run_repair_dir: str
    snap_interfaces_requests_run_dir: str
    snapd_socket: str
    snap_socket: str
    snap_asserts_spool_dir: str

    snap_data_dir: str
    snap_blob_dir: str
    snap_void_dir: str
    snap_download_cache_dir: str
    snap_app_armor_dir: str
    snap_seccomp_base: str
    snap_seccomp_dir: str
    snap_mount_policy_dir: str
    snap_cgroup_policy_dir: str
    snapd_maintenance_file: str
    snapd_store_ssl_certs_dir: str
    snap_interfaces_requests_state_dir: str
    snap_desktop_files_dir: str
    snap_desktop_icons_dir: str
    snap_asserts_db_dir: str
    snap_cookie_dir: str
    snap_seq_dir: str
    snap_state_file: str
    snap_state_lock_file: str
    snap_system_key_file: str
    snap_seed_dir: str
    snap_device_dir: str
    snap_modeenv_file: str
    snap_boot_assets_dir: str
    snap_fde_dir: str
    snap_save_dir: str
    snap_device_save_dir: str
    snap_data_save_dir: str
    snap_repair_config_file: str
    snap_repair_dir: str
    snap_repair_state_file: str
    snap_repair_run_dir: str
    snap_repair_asserts_dir: str
    snap_rollback_dir: str
    snap_dbus_session_services_dir: str
    snap_dbus_system_services_dir: str
    completers_dir: str
    snapshots_dir: str
    features_dir: str

    snap_cache_dir: str
    snap_names_file: str
    snap_sections_file: str
    snap_commands_db: str
    snap_aux_store_info_dir: str
    snap_icons_pool_dir: str
    snap_icons_dir: str

    snap_binaries_dir: str

    snap_services_dir: str
    snap_runtime_services_dir: str
    snap_user_services_dir: str
    snap_systemd_conf_dir: str
    snap_systemd_dir: str
    snap_systemd_run_dir: str

    snap_ldconfig_dir: str
    snap_dbus_system_policy_dir: str
    snap_dbus_session_policy_dir: str
    snap_polkit_policy_dir: str
    snap_polkit_rule_dir: str
    snap_udev_rules_dir: str
    snap_kmod_modules_dir: str
    snap_kmod_modprobe_dir: str

    cloud_instance_data_file: str

    dev_dir: str
    snap_gpio_chardev_dir: str
    sysfs_dir: str

    locale_dir: str
    classic_dir: str

    xdg_runtime_dir_base: str
    xdg_runtime_dir_glob: str

    completion_helper_in_core: str
    bash_completion_script: str
    legacy_completers_dir: str

    system_fonts_dir: str
    system_local_fonts_dir: str
    system_fontconfig_cache_dirs: tuple[str, ...]

    # "/" on classic, where the data disk is the root filesystem; the
    # /writable bind mount of the data disk on Ubuntu Core.
    writable_mount_path: str
    # Only meaningful on Ubuntu Core, points at a non-existing dir on classic.
    writable_ubuntu_core_system_data_dir: str


def build_snap_paths(*, root_dir: str, snap_mount_dir: str, release: ReleaseInfo) -> SnapPaths:
    """Computes the complete layout for ``root_dir``.

    Args:
        root_dir: Global root directory, already normalized.
        snap_mount_dir: Resolved snap mount directory, or the unresolved
            placeholder.
        release: Facts about the running system.

    Returns:
        The immutable layout.
    """

    run_dir = join(root_dir, "/run")
    snap_run_dir = join(root_dir, "/run/snapd")
    snap_seccomp_base = join(root_dir, SNAPPY_DIR, "seccomp")
    snap_save_dir = snap_save_dir_under(root_dir)
    snap_repair_dir = join(root_dir, SNAPPY_DIR, "repair")
    snap_cache_dir = join(root_dir, "/var/cache/snapd")
    dev_dir = join(root_dir, "/dev")
    xdg_runtime_dir_base = join(root_dir, "/run/user")

    if release.on_classic:
        writable_mount_path = root_dir
    else:
        writable_mount_path = join(root_dir, "writable")

    return SnapPaths(
        global_root_dir=root_dir,
        snap_mount_dir=snap_mount_dir,
        distro_libexec_dir=detect_distro_libexec_dir(root_dir),
        run_dir=run_dir,
        snap_run_dir=snap_run_dir,
        snap_run_ns_dir=join(snap_run_dir, "/ns"),
        snap_run_lock_dir=join(snap_run_dir, "/lock"),
        snap_bootstrap_run_dir=join(snap_run_dir, "snap-bootstrap"),
        snap_run_repair_dir=join(snap_run_dir, "repair"),
        snap_interfaces_requests_run_dir=join(snap_run_dir, "interfaces-requests"),
        # keep in sync with the snapd.socket unit
        snapd_socket=join(root_dir, "/run/snapd.socket"),
        snap_socket=join(root_dir, "/run/snapd-snap.socket"),
        snap_asserts_spool_dir=join(root_dir, "run/snapd/auto-import"),
        snap_data_dir=join(root_dir, "/var/snap"),
        snap_blob_dir=snap_blob_dir_under(root_dir),
        snap_void_dir=join(root_dir, SNAPPY_DIR, "void"),
        snap_download_cache_dir=join(root_dir, SNAPPY_DIR, "cache"),
        snap_app_armor_dir=join(root_dir, SNAPPY_DIR, "apparmor", "profiles"),
        snap_seccomp_base=snap_seccomp_base,
        snap_seccomp_dir=join(snap_seccomp_base, "bpf"),
        snap_mount_policy_dir=join(root_dir, SNAPPY_DIR, "mount"),
        snap_cgroup_policy_dir=join(root_dir, SNAPPY_DIR, "cgroup"),
        snapd_maintenance_file=join(root_dir, SNAPPY_DIR, "maintenance.json"),
        snapd_store_ssl_certs_dir=join(root_dir, SNAPPY_DIR, "ssl/store-certs"),
        snap_interfaces_requests_state_dir=join(root_dir, SNAPPY_DIR, "interfaces-requests"),
        # Added to $XDG_DATA_DIRS, subdirectories follow the freedesktop.org
        # specifications.
        snap_desktop_files_dir=join(root_dir, SNAPPY_DIR, "desktop", "applications"),
        snap_desktop_icons_dir=join(root_dir, SNAPPY_DIR, "desktop", "icons"),
        snap_asserts_db_dir=join(root_dir, SNAPPY_DIR, "assertions"),
        snap_cookie_dir=join(root_dir, SNAPPY_DIR, "cookie"),
        snap_seq_dir=join(root_dir, SNAPPY_DIR, "sequence"),
        snap_state_file=snap_state_file_under(root_dir),
        snap_state_lock_file=snap_state_lock_file_under(root_dir),
        snap_system_key_file=join(root_dir, SNAPPY_DIR, "system-key"),
        snap_seed_dir=snap_seed_dir_under(root_dir),
        snap_device_dir=snap_device_dir_under(root_dir),
        snap_modeenv_file=snap_modeenv_file_under(root_dir),
        snap_boot_assets_dir=snap_boot_assets_dir_under(root_dir),
        snap_fde_dir=snap_fde_dir_under(root_dir),
        snap_save_dir=snap_save_dir,
        snap_device_save_dir=join(snap_save_dir, "device"),
        snap_data_save_dir=join(snap_save_dir, "snap"),
        snap_repair_config_file=snap_repair_config_file_under(root_dir),
        snap_repair_dir=snap_repair_dir,
        snap_repair_state_file=join(snap_repair_dir, "repair.json"),
        snap_repair_run_dir=join(snap_repair_dir, "run"),
        snap_repair_asserts_dir=join(snap_repair_dir, "assertions"),
        snap_rollback_dir=join(root_dir, SNAPPY_DIR, "rollback"),
        # Mirrors the /usr/share/dbus-1 hierarchy.
        snap_dbus_session_services_dir=join(root_dir, SNAPPY_DIR, "dbus-1", "services"),
        snap_dbus_system_services_dir=join(root_dir, SNAPPY_DIR, "dbus-1", "system-services"),
        completers_dir=join(root_dir, SNAPPY_DIR, "desktop/bash-completion/completions/"),
        snapshots_dir=join(root_dir, SNAPPY_DIR, "snapshots"),
        features_dir=features_dir_under(root_dir),
        snap_cache_dir=snap_cache_dir,
        snap_names_file=join(snap_cache_dir, "names"),
        snap_sections_file=join(snap_cache_dir, "sections"),
        snap_commands_db=join(snap_cache_dir, "commands.db"),
        snap_aux_store_info_dir=join(snap_cache_dir, "aux"),
        snap_icons_pool_dir=join(snap_cache_dir, "icons-pool"),
        snap_icons_dir=join(snap_cache_dir, "icons"),
        snap_binaries_dir=join(snap_mount_dir, "bin"),
        snap_services_dir=snap_services_dir_under(root_dir),
        snap_runtime_services_dir=snap_runtime_services_dir_under(root_dir),
        snap_user_services_dir=join(root_dir, "/etc/systemd/user"),
        snap_systemd_conf_dir=snap_systemd_conf_dir_under(root_dir),
        snap_systemd_dir=snap_systemd_dir_under(root_dir),
        snap_systemd_run_dir=join(root_dir, "/run/systemd"),
        snap_ldconfig_dir=join(root_dir, "/etc/ld.so.conf.d"),
        snap_dbus_system_policy_dir=join(root_dir, "/etc/dbus-1/system.d"),
        snap_dbus_session_policy_dir=join(root_dir, "/etc/dbus-1/session.d"),
        snap_polkit_policy_dir=join(root_dir, "/usr/share/polkit-1/actions"),
        snap_polkit_rule_dir=join(root_dir, "/etc/polkit-1/rules.d"),
        snap_udev_rules_dir=join(root_dir, "/etc/udev/rules.d"),
        snap_kmod_modules_dir=join(root_dir, "/etc/modules-load.d/"),
        snap_kmod_modprobe_dir=join(root_dir, "/etc/modprobe.d/"),
        cloud_instance_data_file=join(root_dir, "/run/cloud-init/instance-data.json"),
        dev_dir=dev_dir,
        snap_gpio_chardev_dir=join(dev_dir, "/snap/gpio-chardev"),
        sysfs_dir=join(root_dir, "/sys"),
        locale_dir=join(root_dir, "/usr/share/locale"),
        classic_dir=join(root_dir, "/writable/classic"),
        xdg_runtime_dir_base=xdg_runtime_dir_base,
        xdg_runtime_dir_glob=join(xdg_runtime_dir_base, "*/"),
        completion_helper_in_core=join(CORE_LIBEXEC_DIR, "etelpmoc.sh"),
        bash_completion_script=join(root_dir, "/usr/share/bash-completion/bash_completion"),
        legacy_completers_dir=join(root_dir, "/usr/share/bash-completion/completions/"),
        # These agree across all supported distributions.
        system_fonts_dir=join(root_dir, "/usr/share/fonts"),
        system_local_fonts_dir=join(root_dir, "/usr/local/share/fonts"),
        system_fontconfig_cache_dirs=fontconfig_cache_dirs(root_dir, release=release),
        writable_mount_path=writable_mount_path,
        writable_ubuntu_core_system_data_dir=join(writable_mount_path, "system-data"),
    )
